from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base
import enum


class MissionType(str, enum.Enum):
    """Kind of content a mission asks for"""
    POST = "post"
    STORY = "story"
    REEL = "reel"
    TUTO = "tuto"
    ENGAGEMENT = "engagement"


PUBLICATION_TYPES = (MissionType.POST.value, MissionType.STORY.value, MissionType.REEL.value)


class MissionTemplate(Base):
    """Reusable mission definition, read-only for the assigner"""
    __tablename__ = "mission_templates"

    id = Column(Integer, primary_key=True, index=True)
    strategy_id = Column(Integer, ForeignKey("strategies.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(20), nullable=False)
    title = Column(String(255), nullable=False)
    content_idea = Column(Text, nullable=False, default="")
    order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    # Tutorial a "tuto" mission points at
    tutorial_id = Column(Integer, ForeignKey("tutorials.id"), nullable=True)
    # Prerequisite: the template is hidden until this tutorial is completed
    required_tutorial_id = Column(Integer, ForeignKey("tutorials.id"), nullable=True)

    # Reminder time override (HH:MM)
    notification_time = Column(String(5), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    strategy = relationship("Strategy", back_populates="templates")
    missions = relationship("Mission", back_populates="mission_template")

    def __repr__(self):
        return f"<MissionTemplate(id={self.id}, type={self.type}, title={self.title})>"

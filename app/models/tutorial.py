from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from app.database import Base
import enum


class TutorialFeedback(str, enum.Enum):
    USEFUL = "useful"
    NOT_USEFUL = "not_useful"


class Tutorial(Base):
    """Tutorial a user can watch; may gate mission templates"""
    __tablename__ = "tutorials"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    required_level = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Tutorial(id={self.id}, title={self.title})>"


class TutorialCompletion(Base):
    """Finished tutorials of a user"""
    __tablename__ = "tutorial_completions"
    __table_args__ = (UniqueConstraint("user_id", "tutorial_id", name="uq_tutorial_completion_user_tutorial"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    tutorial_id = Column(Integer, ForeignKey("tutorials.id", ondelete="CASCADE"), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=False)
    feedback = Column(String(20), nullable=True)

    def __repr__(self):
        return f"<TutorialCompletion(user_id={self.user_id}, tutorial_id={self.tutorial_id})>"

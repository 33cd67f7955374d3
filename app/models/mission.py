from datetime import datetime, timezone
from sqlalchemy import Column, Integer, Boolean, DateTime, ForeignKey, String, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base
import enum


class MissionStatus(str, enum.Enum):
    """Mission status"""
    PENDING = "pending"
    COMPLETED = "completed"
    SKIPPED = "skipped"


class Mission(Base):
    """A template assigned to a user for one UTC day, in one of three slots"""
    __tablename__ = "missions"
    __table_args__ = (
        Index("ix_missions_user_assigned_slot", "user_id", "assigned_at", "slot_number"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    mission_template_id = Column(Integer, ForeignKey("mission_templates.id", ondelete="CASCADE"), nullable=False)

    slot_number = Column(Integer, nullable=False, default=1)  # 1=publication, 2=engagement, 3=tuto/alternate
    status = Column(String(20), nullable=False, default=MissionStatus.PENDING.value)
    is_recommended = Column(Boolean, nullable=False, default=False)

    assigned_at = Column(DateTime(timezone=True), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    # One pass or reload per mission
    used_pass = Column(Boolean, nullable=False, default=False)
    used_reload = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="missions")
    mission_template = relationship("MissionTemplate", back_populates="missions", lazy="joined")

    def __repr__(self):
        return f"<Mission(id={self.id}, user_id={self.user_id}, slot={self.slot_number}, status={self.status})>"

    @property
    def is_pending(self) -> bool:
        return self.status == MissionStatus.PENDING.value

    def is_assigned_on(self, day) -> bool:
        """Whether the mission was assigned on the given UTC date"""
        assigned_at = self.assigned_at
        if assigned_at.tzinfo is not None:
            assigned_at = assigned_at.astimezone(timezone.utc)
        return assigned_at.date() == day

    def can_use_pass_or_reload(self, today=None) -> bool:
        """Skip/reload is allowed once, on the day of the mission, while pending"""
        today = today or datetime.now(timezone.utc).date()
        return (
            self.is_assigned_on(today)
            and not self.used_pass
            and not self.used_reload
            and self.is_pending
        )

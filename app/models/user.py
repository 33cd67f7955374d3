from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base


class User(Base):
    """Restaurant owner account"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(100), nullable=True)

    # Level system
    xp_total = Column(Integer, nullable=False, default=0)
    current_level = Column(Integer, nullable=False, default=1)

    # Daily reminder time (HH:MM, reminder timezone)
    notification_time = Column(String(5), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    restaurant = relationship("Restaurant", back_populates="user", uselist=False)
    missions = relationship("Mission", back_populates="user", order_by="Mission.assigned_at.desc()")

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, level={self.current_level}, xp={self.xp_total})>"

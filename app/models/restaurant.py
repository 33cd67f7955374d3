from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base
import enum


class PublicationRhythm(str, enum.Enum):
    """How often the restaurant wants to publish"""
    DAILY = "daily"            # every day
    FIVE_WEEK = "five_week"    # Monday to Friday
    THREE_WEEK = "three_week"  # Monday, Wednesday, Friday
    ONCE_WEEK = "once_week"    # Monday only


class RestaurantType(str, enum.Enum):
    BRASSERIE = "brasserie"
    GASTRONOMIQUE = "gastronomique"
    FAST_FOOD = "fast_food"
    PIZZERIA = "pizzeria"
    CAFE_BAR = "cafe_bar"
    AUTRE = "autre"


class Restaurant(Base):
    """Restaurant profile of a user"""
    __tablename__ = "restaurants"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    name = Column(String(255), nullable=False)
    type = Column(String(30), default=RestaurantType.AUTRE.value)
    city = Column(String(100), nullable=True)

    # Content strategy; no strategy means no missions
    strategy_id = Column(Integer, ForeignKey("strategies.id"), nullable=True)
    publication_rhythm = Column(String(20), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="restaurant")
    strategy = relationship("Strategy")

    def __repr__(self):
        return f"<Restaurant(id={self.id}, name={self.name}, strategy_id={self.strategy_id}, rhythm={self.publication_rhythm})>"

"""Pitch model."""
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, DateTime, Numeric
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


class Pitch(Base):
    """Represents a bookable sports pitch."""

    __tablename__ = "pitches"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    name = Column(String, nullable=False)
    address = Column(String, nullable=True)
    city = Column(String, nullable=True)
    sport = Column(String, nullable=False)  # fut5, futsal, fut7, fut11
    base_price = Column(Numeric(10, 2), nullable=False, default=0)
    timezone = Column(String, nullable=True)
    allow_post_game_payments = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    reservations = relationship("Reservation", back_populates="pitch", cascade="all, delete-orphan")

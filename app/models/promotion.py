"""Promotion model."""
from sqlalchemy import Column, Integer, String, Date, DateTime, JSON
from sqlalchemy.sql import func
from app.core.database import Base


class Promotion(Base):
    """Represents a time-windowed discount on pitch bookings."""

    __tablename__ = "promotions"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    discount_percent = Column(Integer, nullable=False)
    valid_from = Column(Date, nullable=False)
    valid_to = Column(Date, nullable=False)
    applicable_days = Column(JSON, nullable=False, default=list)   # 0 = Sunday ... 6 = Saturday
    applicable_hours = Column(JSON, nullable=False, default=list)  # 0-23
    pitch_ids = Column(JSON, nullable=False, default=list)         # Empty = every pitch
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

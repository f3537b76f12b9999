"""Reservation model."""
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Numeric, Index, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


class Reservation(Base):
    """Represents one booked hour on a pitch."""

    __tablename__ = "reservations"

    id = Column(Integer, primary_key=True, index=True)
    pitch_id = Column(Integer, ForeignKey("pitches.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(DateTime, nullable=False)  # Local wall-clock time of the pitch, hour granularity
    status = Column(String, nullable=False, default="Pending")  # Pending, Confirmed, Scheduled, Canceled
    payment_status = Column(String, nullable=False, default="Pending")  # Paid, Pending, Overdue, Cancelled
    total_amount = Column(Numeric(10, 2), nullable=False, default=0)
    promotion_id = Column(Integer, ForeignKey("promotions.id", ondelete="SET NULL"), nullable=True)
    actor_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    actor_role = Column(String, nullable=True)
    manager_ref = Column(Integer, nullable=True)
    player_ref = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    pitch = relationship("Pitch", back_populates="reservations")

    __table_args__ = (
        Index("ix_reservations_pitch_date", "pitch_id", "date"),
        # One live reservation per pitch-hour; canceled rows free the slot
        Index(
            "uq_reservations_active_slot",
            "pitch_id",
            "date",
            unique=True,
            postgresql_where=text("status != 'Canceled'"),
            sqlite_where=text("status != 'Canceled'"),
        ),
    )

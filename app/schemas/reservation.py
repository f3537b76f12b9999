"""Reservation schemas."""
from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import date, datetime
from decimal import Decimal

from app.schemas.enums import PaymentStatus, ReservationStatus, UserRole


class ReservationRequest(BaseModel):
    """Schema for requesting a booking of one slot."""

    pitch_id: int
    day: date
    time: str  # "HH:MM"
    team_id: Optional[int] = None
    allow_challenges: bool = False
    allow_external_players: bool = False


class ReservationInDB(BaseModel):
    """Schema for reservation from database."""

    id: int
    pitch_id: int
    date: datetime
    status: ReservationStatus
    payment_status: PaymentStatus
    total_amount: Decimal
    promotion_id: Optional[int] = None
    actor_id: Optional[int] = None
    actor_role: Optional[UserRole] = None
    manager_ref: Optional[int] = None
    player_ref: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

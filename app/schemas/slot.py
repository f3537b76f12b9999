"""Slot and schedule schemas."""
from pydantic import BaseModel
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal

from app.schemas.enums import SlotStatus
from app.schemas.match import MatchInDB
from app.schemas.promotion import PromotionInDB
from app.schemas.reservation import ReservationInDB


class SlotInfo(BaseModel):
    """Resolved state of one (pitch, day, hour) slot for one actor."""

    status: SlotStatus
    price: Decimal
    match: Optional[MatchInDB] = None
    reservation: Optional[ReservationInDB] = None
    promotion: Optional[PromotionInDB] = None


class ScheduleSlot(BaseModel):
    """Schema for a single cell of a pitch schedule."""

    date: date
    time: str
    status: SlotStatus
    price: Decimal
    reservation_id: Optional[int] = None
    match_id: Optional[int] = None
    promotion_id: Optional[int] = None
    discount_percent: Optional[int] = None


class PitchScheduleResponse(BaseModel):
    """Schema for a pitch schedule response."""

    pitch_id: int
    pitch_name: str
    actor_id: int
    generated_at: datetime
    slots: List[ScheduleSlot]

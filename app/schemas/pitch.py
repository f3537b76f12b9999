"""Pitch schemas."""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal
import pytz

from app.schemas.enums import Sport


def validate_timezone_name(value: Optional[str]) -> Optional[str]:
    """Reject names the tz database does not know."""
    if value is None:
        return value
    try:
        pytz.timezone(value)
    except pytz.UnknownTimeZoneError:
        raise ValueError(f"Unknown timezone '{value}'")
    return value


class PitchBase(BaseModel):
    """Base pitch schema."""

    name: str
    sport: Sport
    base_price: Decimal = Field(default=Decimal("0"), ge=0)
    address: Optional[str] = None
    city: Optional[str] = None
    timezone: Optional[str] = None
    allow_post_game_payments: bool = False

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, value: Optional[str]) -> Optional[str]:
        return validate_timezone_name(value)


class PitchCreate(PitchBase):
    """Schema for creating a pitch."""

    owner_id: Optional[int] = None


class PitchUpdate(BaseModel):
    """Schema for updating a pitch."""

    name: Optional[str] = None
    sport: Optional[Sport] = None
    base_price: Optional[Decimal] = Field(default=None, ge=0)
    address: Optional[str] = None
    city: Optional[str] = None
    timezone: Optional[str] = None
    allow_post_game_payments: Optional[bool] = None

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, value: Optional[str]) -> Optional[str]:
        return validate_timezone_name(value)


class PitchInDB(PitchBase):
    """Schema for pitch from database."""

    id: int
    owner_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

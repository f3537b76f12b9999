"""Promotion schemas."""
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional, List
from datetime import date, datetime


class PromotionBase(BaseModel):
    """Base promotion schema."""

    name: str
    discount_percent: int = Field(ge=0, le=100)
    valid_from: date
    valid_to: date
    applicable_days: List[int] = Field(default_factory=list)  # 0 = Sunday ... 6 = Saturday
    applicable_hours: List[int] = Field(default_factory=list)
    pitch_ids: List[int] = Field(default_factory=list)  # Empty = every pitch


class PromotionCreate(PromotionBase):
    """Schema for creating a promotion."""

    @model_validator(mode="after")
    def check_window(self):
        if self.valid_from > self.valid_to:
            raise ValueError("valid_from must be before or equal to valid_to")
        if any(day < 0 or day > 6 for day in self.applicable_days):
            raise ValueError("applicable_days must be between 0 (Sunday) and 6 (Saturday)")
        if any(hour < 0 or hour > 23 for hour in self.applicable_hours):
            raise ValueError("applicable_hours must be between 0 and 23")
        return self


class PromotionUpdate(BaseModel):
    """Schema for updating a promotion."""

    name: Optional[str] = None
    discount_percent: Optional[int] = Field(default=None, ge=0, le=100)
    valid_from: Optional[date] = None
    valid_to: Optional[date] = None
    applicable_days: Optional[List[int]] = None
    applicable_hours: Optional[List[int]] = None
    pitch_ids: Optional[List[int]] = None


class PromotionInDB(PromotionBase):
    """Schema for promotion from database."""

    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

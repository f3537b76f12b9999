"""User and team schemas."""
from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

from app.schemas.enums import UserRole


class UserBase(BaseModel):
    """Base user schema."""

    name: str
    email: str
    role: UserRole


class UserCreate(UserBase):
    """Schema for creating a user."""

    pass


class UserInDB(UserBase):
    """Schema for user from database. Also the actor seen by the slot resolver."""

    id: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TeamCreate(BaseModel):
    """Schema for creating a team. The acting manager becomes its manager."""

    name: str
    city: Optional[str] = None


class TeamInDB(TeamCreate):
    """Schema for team from database."""

    id: int
    manager_id: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

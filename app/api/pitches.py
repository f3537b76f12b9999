"""Pitch and schedule endpoints."""
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_actor
from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import NotFoundError
from app.models.pitch import Pitch
from app.schemas.enums import UserRole
from app.schemas.pitch import PitchCreate, PitchInDB, PitchUpdate
from app.schemas.slot import PitchScheduleResponse, SlotInfo
from app.schemas.user import UserInDB
from app.services.schedule_service import get_pitch_schedule, resolve_pitch_slot

router = APIRouter(prefix="/pitches", tags=["pitches"])


def _require_pitch_owner(actor: UserInDB, pitch: Pitch):
    if actor.role == UserRole.ADMIN:
        return
    if actor.role == UserRole.OWNER and pitch.owner_id == actor.id:
        return
    raise HTTPException(status_code=403, detail="You do not manage this pitch")


@router.post("", response_model=PitchInDB, status_code=201)
async def create_pitch(
    pitch: PitchCreate,
    actor: UserInDB = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    """
    Register a pitch.

    Owners always own the pitches they create; admins may name an owner.

    Args:
        pitch: Pitch data
        actor: Acting user
        db: Database session

    Returns:
        Created pitch
    """
    if actor.role not in (UserRole.OWNER, UserRole.ADMIN):
        raise HTTPException(status_code=403, detail="Only owners can register pitches")

    pitch_data = pitch.model_dump()
    pitch_data["sport"] = pitch.sport.value
    if actor.role == UserRole.OWNER:
        pitch_data["owner_id"] = actor.id

    db_pitch = Pitch(**pitch_data)
    db.add(db_pitch)
    await db.commit()
    await db.refresh(db_pitch)

    return db_pitch


@router.get("", response_model=List[PitchInDB])
async def list_pitches(
    skip: int = 0,
    limit: int = 100,
    city: str = None,
    db: AsyncSession = Depends(get_db),
):
    """List pitches, optionally filtered by city."""
    query = select(Pitch)
    if city:
        query = query.where(Pitch.city == city)

    result = await db.execute(query.offset(skip).limit(limit))
    return result.scalars().all()


@router.get("/{pitch_id}", response_model=PitchInDB)
async def get_pitch(
    pitch_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Get a specific pitch by ID."""
    result = await db.execute(select(Pitch).where(Pitch.id == pitch_id))
    pitch = result.scalar_one_or_none()

    if not pitch:
        raise HTTPException(status_code=404, detail="Pitch not found")

    return pitch


@router.patch("/{pitch_id}", response_model=PitchInDB)
async def update_pitch(
    pitch_id: int,
    pitch_update: PitchUpdate,
    actor: UserInDB = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    """Update a pitch's information."""
    result = await db.execute(select(Pitch).where(Pitch.id == pitch_id))
    pitch = result.scalar_one_or_none()

    if not pitch:
        raise HTTPException(status_code=404, detail="Pitch not found")
    _require_pitch_owner(actor, pitch)

    update_data = pitch_update.model_dump(exclude_unset=True)
    if update_data.get("sport") is not None:
        update_data["sport"] = update_data["sport"].value
    for field, value in update_data.items():
        setattr(pitch, field, value)

    await db.commit()
    await db.refresh(pitch)

    return pitch


@router.delete("/{pitch_id}", status_code=204)
async def delete_pitch(
    pitch_id: int,
    actor: UserInDB = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    """Delete a pitch and all its reservations."""
    result = await db.execute(select(Pitch).where(Pitch.id == pitch_id))
    pitch = result.scalar_one_or_none()

    if not pitch:
        raise HTTPException(status_code=404, detail="Pitch not found")
    _require_pitch_owner(actor, pitch)

    await db.delete(pitch)
    await db.commit()


@router.get("/{pitch_id}/schedule", response_model=PitchScheduleResponse)
async def get_schedule(
    pitch_id: int,
    start: Optional[date] = Query(default=None, description="First day shown (defaults to the pitch's local today)"),
    days: int = Query(
        default=settings.DEFAULT_SCHEDULE_DAYS,
        ge=1,
        le=settings.MAX_SCHEDULE_DAYS,
        description="Number of days shown",
    ),
    actor: UserInDB = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    """
    Get the hourly schedule of a pitch as seen by the acting user.

    Every cell carries one status (Available, Pending, Booked, OpenForPlayers,
    OpenForTeam, Past or Live) and the price to display.

    Args:
        pitch_id: Pitch ID
        start: First day shown
        days: Number of days shown
        actor: Acting user
        db: Database session

    Returns:
        Schedule grid
    """
    try:
        return await get_pitch_schedule(db, pitch_id, actor, start, days)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to build schedule: {str(e)}",
        )


@router.get("/{pitch_id}/slot", response_model=SlotInfo)
async def get_slot(
    pitch_id: int,
    day: date = Query(..., description="Day of the slot"),
    time: str = Query(..., pattern=r"^\d{1,2}(:\d{2})?$", description="Slot start, HH:MM"),
    actor: UserInDB = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    """Resolve a single slot with the reservation, match and promotion behind it."""
    try:
        return await resolve_pitch_slot(db, pitch_id, actor, day, time)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

"""Reservation endpoints."""
from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_actor
from app.core.database import get_db
from app.core.exceptions import BookingError, NotFoundError
from app.models.reservation import Reservation
from app.schemas.reservation import ReservationInDB, ReservationRequest
from app.schemas.user import UserInDB
from app.services.booking_service import booking_service

router = APIRouter(prefix="/reservations", tags=["reservations"])


@router.post("", response_model=ReservationInDB, status_code=201)
async def request_reservation(
    request: ReservationRequest,
    actor: UserInDB = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    """
    Request a booking for an available slot.

    The reservation starts Pending until the pitch owner approves it.
    Managers must book for one of their teams; that opens a practice match
    which can accept challengers and external players.

    Args:
        request: Pitch, day, time and match options
        actor: Acting user
        db: Database session

    Returns:
        Created reservation
    """
    try:
        return await booking_service.request_reservation(db, actor, request)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except BookingError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to request reservation: {str(e)}",
        )


@router.get("", response_model=List[ReservationInDB])
async def list_reservations(
    pitch_id: int = None,
    mine: bool = False,
    skip: int = 0,
    limit: int = 100,
    actor: UserInDB = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    """List reservations, optionally for one pitch or only the actor's own."""
    query = select(Reservation)
    if pitch_id is not None:
        query = query.where(Reservation.pitch_id == pitch_id)
    if mine:
        query = query.where(Reservation.actor_id == actor.id)

    result = await db.execute(
        query.order_by(Reservation.date).offset(skip).limit(limit)
    )
    return result.scalars().all()


@router.get("/{reservation_id}", response_model=ReservationInDB)
async def get_reservation(
    reservation_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Get a specific reservation by ID."""
    result = await db.execute(select(Reservation).where(Reservation.id == reservation_id))
    reservation = result.scalar_one_or_none()

    if not reservation:
        raise HTTPException(status_code=404, detail="Reservation not found")

    return reservation


@router.post("/{reservation_id}/approve", response_model=ReservationInDB)
async def approve_reservation(
    reservation_id: int,
    actor: UserInDB = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    """Confirm a pending reservation (pitch owner or admin)."""
    try:
        return await booking_service.approve_reservation(db, actor, reservation_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except BookingError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/{reservation_id}/pay", response_model=ReservationInDB)
async def mark_reservation_paid(
    reservation_id: int,
    actor: UserInDB = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    """Record a settled payment for a reservation (pitch owner or admin)."""
    try:
        return await booking_service.mark_reservation_paid(db, actor, reservation_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except BookingError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/{reservation_id}/cancel", response_model=ReservationInDB)
async def cancel_reservation(
    reservation_id: int,
    actor: UserInDB = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    """Cancel a reservation; its match is cancelled too and the slot frees up."""
    try:
        return await booking_service.cancel_reservation(db, actor, reservation_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except BookingError as e:
        raise HTTPException(status_code=400, detail=str(e))

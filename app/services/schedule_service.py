"""Schedule service: loads pitch snapshots and runs the slot resolver over them."""
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, time as dt_time
from typing import List, Optional, Sequence, Tuple
import pytz
from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import NotFoundError
from app.models.match import Match
from app.models.pitch import Pitch
from app.models.promotion import Promotion
from app.models.reservation import Reservation
from app.schemas.match import MatchInDB
from app.schemas.pitch import PitchInDB
from app.schemas.promotion import PromotionInDB
from app.schemas.reservation import ReservationInDB
from app.schemas.slot import PitchScheduleResponse, ScheduleSlot, SlotInfo
from app.schemas.user import UserInDB
from app.services.slot_status import resolve_slot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlotSnapshot:
    """Immutable view of one pitch's bookings over a window of days."""

    pitch: PitchInDB
    reservations: Tuple[ReservationInDB, ...] = ()
    matches: Tuple[MatchInDB, ...] = ()
    promotions: Tuple[PromotionInDB, ...] = ()


def pitch_local_now(timezone: Optional[str]) -> datetime:
    """Current wall-clock time at the pitch, as a naive datetime."""
    pitch_tz = pytz.timezone(timezone or settings.DEFAULT_TIMEZONE)
    return datetime.now(pytz.UTC).astimezone(pitch_tz).replace(tzinfo=None)


def build_schedule(
    snapshot: SlotSnapshot,
    actor: UserInDB,
    days: Sequence[date],
    hour_labels: Sequence[str],
    now: datetime,
) -> List[ScheduleSlot]:
    """Resolve every (day, hour) cell of a pitch schedule."""
    slots = []
    for day in days:
        for hour_label in hour_labels:
            info = resolve_slot(
                day,
                hour_label,
                snapshot.pitch,
                actor,
                snapshot.reservations,
                snapshot.matches,
                snapshot.promotions,
                now=now,
            )
            slots.append(
                ScheduleSlot(
                    date=day,
                    time=hour_label,
                    status=info.status,
                    price=info.price,
                    reservation_id=info.reservation.id if info.reservation else None,
                    match_id=info.match.id if info.match else None,
                    promotion_id=info.promotion.id if info.promotion else None,
                    discount_percent=info.promotion.discount_percent if info.promotion else None,
                )
            )
    return slots


async def get_pitch(db: AsyncSession, pitch_id: int) -> Pitch:
    """Get a pitch or raise NotFoundError."""
    result = await db.execute(select(Pitch).where(Pitch.id == pitch_id))
    pitch = result.scalar_one_or_none()

    if not pitch:
        raise NotFoundError(f"Pitch {pitch_id} not found")

    return pitch


async def load_slot_snapshot(
    db: AsyncSession, pitch_id: int, start_day: date, days: int = 1
) -> SlotSnapshot:
    """
    Load everything the resolver needs for a pitch over a window of days.

    Args:
        db: Database session
        pitch_id: Pitch ID
        start_day: First day of the window
        days: Number of days in the window

    Returns:
        SlotSnapshot of the pitch, its reservations, their matches and the
        promotions overlapping the window
    """
    pitch = await get_pitch(db, pitch_id)

    window_start = datetime.combine(start_day, dt_time.min)
    window_end = window_start + timedelta(days=days)
    last_day = start_day + timedelta(days=days - 1)

    result = await db.execute(
        select(Reservation)
        .where(
            and_(
                Reservation.pitch_id == pitch_id,
                Reservation.date >= window_start,
                Reservation.date < window_end,
            )
        )
        .order_by(Reservation.date, Reservation.id)
    )
    reservations = result.scalars().all()

    matches = []
    reservation_ids = [reservation.id for reservation in reservations]
    if reservation_ids:
        result = await db.execute(
            select(Match)
            .where(Match.reservation_ref.in_(reservation_ids))
            .order_by(Match.id)
        )
        matches = result.scalars().all()

    result = await db.execute(
        select(Promotion)
        .where(
            and_(
                Promotion.valid_from <= last_day,
                Promotion.valid_to >= start_day,
            )
        )
        .order_by(Promotion.id)
    )
    promotions = result.scalars().all()

    logger.debug(
        f"Loaded snapshot for pitch {pitch_id} from {start_day} + {days} days: "
        f"{len(reservations)} reservations, {len(matches)} matches, {len(promotions)} promotions"
    )

    return SlotSnapshot(
        pitch=PitchInDB.model_validate(pitch),
        reservations=tuple(ReservationInDB.model_validate(r) for r in reservations),
        matches=tuple(MatchInDB.model_validate(m) for m in matches),
        promotions=tuple(PromotionInDB.model_validate(p) for p in promotions),
    )


async def resolve_pitch_slot(
    db: AsyncSession,
    pitch_id: int,
    actor: UserInDB,
    day: date,
    hour_label: str,
    now: Optional[datetime] = None,
) -> SlotInfo:
    """Resolve a single slot against fresh data from the database."""
    snapshot = await load_slot_snapshot(db, pitch_id, day, 1)
    if now is None:
        now = pitch_local_now(snapshot.pitch.timezone)

    return resolve_slot(
        day,
        hour_label,
        snapshot.pitch,
        actor,
        snapshot.reservations,
        snapshot.matches,
        snapshot.promotions,
        now=now,
    )


async def get_pitch_schedule(
    db: AsyncSession,
    pitch_id: int,
    actor: UserInDB,
    start_day: Optional[date] = None,
    days: int = 1,
    now: Optional[datetime] = None,
) -> PitchScheduleResponse:
    """
    Build the schedule grid of a pitch as seen by one actor.

    Args:
        db: Database session
        pitch_id: Pitch ID
        actor: User viewing the schedule
        start_day: First day shown, defaults to the pitch's local today
        days: Number of days shown
        now: Override for the pitch's current local time

    Returns:
        PitchScheduleResponse with one slot per day and configured hour
    """
    if now is None:
        pitch = await get_pitch(db, pitch_id)
        now = pitch_local_now(pitch.timezone)
    if start_day is None:
        start_day = now.date()

    snapshot = await load_slot_snapshot(db, pitch_id, start_day, days)

    day_list = [start_day + timedelta(days=offset) for offset in range(days)]
    slots = build_schedule(
        snapshot, actor, day_list, settings.schedule_hour_labels, now
    )

    return PitchScheduleResponse(
        pitch_id=snapshot.pitch.id,
        pitch_name=snapshot.pitch.name,
        actor_id=actor.id,
        generated_at=now,
        slots=slots,
    )

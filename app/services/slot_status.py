"""Slot status resolver.

Classifies one (pitch, day, hour) slot for one actor from an in-memory
snapshot of reservations, matches and promotions. Everything here is pure:
no I/O, inputs are never mutated, and the same inputs always give the same
SlotInfo.

Resolution order, first hit wins:

    Past > Live > OpenForTeam / OpenForPlayers > Booked > Pending > Available

Steps after Past only run for slots that carry an active reservation, except
Available which is the no-reservation path.
"""
from dataclasses import dataclass
from datetime import date, datetime, time as dt_time
from decimal import Decimal
from typing import Callable, Dict, Optional, Sequence, Tuple, Union

from app.schemas.enums import (
    MatchStatus,
    PaymentStatus,
    ReservationStatus,
    SlotStatus,
    UserRole,
)
from app.schemas.match import MatchInDB
from app.schemas.pitch import PitchInDB
from app.schemas.promotion import PromotionInDB
from app.schemas.reservation import ReservationInDB
from app.schemas.slot import SlotInfo
from app.schemas.user import UserInDB
from app.services.promotions import apply_discount, select_best_promotion
from app.services.sports import get_player_capacity


def parse_hour_label(hour_label: str) -> int:
    """
    Parse an "HH:MM" or "HH" label into its hour.

    Raises:
        ValueError: If the label is not a valid hour of the day
    """
    hour = int(str(hour_label).split(":")[0])
    if not 0 <= hour <= 23:
        raise ValueError(f"Hour out of range in slot label '{hour_label}'")
    return hour


def slot_start(day: Union[date, datetime], hour: int) -> datetime:
    """Start of the slot: the day at the given hour with zero minutes and seconds."""
    if isinstance(day, datetime):
        day = day.date()
    return datetime.combine(day, dt_time(hour=hour))


def _same_hour(left: datetime, right: datetime) -> bool:
    # Compared field by field so stored minutes/seconds drift is tolerated
    return (
        left.year == right.year
        and left.month == right.month
        and left.day == right.day
        and left.hour == right.hour
    )


def find_active_reservation(
    reservations: Sequence[ReservationInDB], pitch_id: int, start: datetime
) -> Optional[ReservationInDB]:
    """First non-canceled reservation on this pitch occupying the slot's hour."""
    for reservation in reservations:
        if reservation.status == ReservationStatus.CANCELED:
            continue
        if reservation.pitch_id != pitch_id:
            continue
        if _same_hour(reservation.date, start):
            return reservation
    return None


def find_reservation_match(
    matches: Sequence[MatchInDB], reservation: ReservationInDB
) -> Optional[MatchInDB]:
    """First match (input order) played on the reservation."""
    for match in matches:
        if match.reservation_ref == reservation.id:
            return match
    return None


@dataclass(frozen=True)
class ReservedSlot:
    """Everything the reserved-slot rules look at."""

    pitch: PitchInDB
    actor: UserInDB
    reservation: ReservationInDB
    match: Optional[MatchInDB]

    def info(self, status: SlotStatus, price: Decimal) -> SlotInfo:
        return SlotInfo(
            status=status,
            price=price,
            match=self.match,
            reservation=self.reservation,
        )


SlotRule = Callable[[ReservedSlot], Optional[SlotInfo]]


def live_rule(slot: ReservedSlot) -> Optional[SlotInfo]:
    if slot.match is not None and slot.match.status == MatchStatus.IN_PROGRESS:
        return slot.info(SlotStatus.LIVE, slot.reservation.total_amount)
    return None


def open_for_team_rule(slot: ReservedSlot) -> Optional[SlotInfo]:
    """A manager other than the organiser may challenge a practice match."""
    match = slot.match
    if (
        match.allow_challenges
        and slot.actor.role == UserRole.MANAGER
        and match.manager_ref != slot.actor.id
    ):
        # Challenge terms are agreed outside the booking
        return slot.info(SlotStatus.OPEN_FOR_TEAM, Decimal("0"))
    return None


def open_for_players_rule(slot: ReservedSlot) -> Optional[SlotInfo]:
    """A player may apply to a practice match that still has room."""
    match = slot.match
    capacity = get_player_capacity(slot.pitch.sport)
    if (
        match.allow_external_players
        and slot.actor.role == UserRole.PLAYER
        and match.confirmed_players < capacity
    ):
        share = slot.reservation.total_amount / capacity
        return slot.info(SlotStatus.OPEN_FOR_PLAYERS, share)
    return None


# Roles are exclusive, so at most one of these can apply to a given actor.
PRACTICE_MATCH_RULES: Dict[UserRole, SlotRule] = {
    UserRole.MANAGER: open_for_team_rule,
    UserRole.PLAYER: open_for_players_rule,
}


def practice_match_rule(slot: ReservedSlot) -> Optional[SlotInfo]:
    if slot.match is None or not slot.match.is_practice_match:
        return None
    rule = PRACTICE_MATCH_RULES.get(slot.actor.role)
    if rule is None:
        return None
    return rule(slot)


def booked_rule(slot: ReservedSlot) -> Optional[SlotInfo]:
    if slot.reservation.payment_status == PaymentStatus.PAID:
        return slot.info(SlotStatus.BOOKED, slot.reservation.total_amount)
    return None


def pending_rule(slot: ReservedSlot) -> Optional[SlotInfo]:
    return slot.info(SlotStatus.PENDING, slot.reservation.total_amount)


RESERVED_SLOT_RULES: Tuple[SlotRule, ...] = (
    live_rule,
    practice_match_rule,
    booked_rule,
    pending_rule,
)


def resolve_slot(
    day: Union[date, datetime],
    hour_label: str,
    pitch: PitchInDB,
    actor: UserInDB,
    reservations: Sequence[ReservationInDB] = (),
    matches: Sequence[MatchInDB] = (),
    promotions: Sequence[PromotionInDB] = (),
    now: Optional[datetime] = None,
) -> SlotInfo:
    """
    Resolve the status and display price of one slot.

    Args:
        day: Calendar day of the slot
        hour_label: Slot start, "HH:MM"
        pitch: Pitch the slot belongs to
        actor: User looking at the slot
        reservations: Reservations snapshot (any pitch, any status)
        matches: Matches snapshot
        promotions: Promotions snapshot
        now: Current local wall-clock time of the pitch; defaults to datetime.now()

    Returns:
        SlotInfo with exactly one status
    """
    hour = parse_hour_label(hour_label)
    start = slot_start(day, hour)
    if now is None:
        now = datetime.now()

    if start < now:
        return SlotInfo(status=SlotStatus.PAST, price=pitch.base_price)

    reservation = find_active_reservation(reservations, pitch.id, start)
    if reservation is None:
        promotion = select_best_promotion(promotions, start, hour, pitch.id)
        return SlotInfo(
            status=SlotStatus.AVAILABLE,
            price=apply_discount(pitch.base_price, promotion),
            promotion=promotion,
        )

    slot = ReservedSlot(
        pitch=pitch,
        actor=actor,
        reservation=reservation,
        match=find_reservation_match(matches, reservation),
    )
    for rule in RESERVED_SLOT_RULES:
        info = rule(slot)
        if info is not None:
            return info

    # pending_rule always answers
    return pending_rule(slot)

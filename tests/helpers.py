"""Builders for snapshot objects used across the tests."""
from datetime import date, datetime
from decimal import Decimal

from app.schemas.enums import (
    MatchStatus,
    PaymentStatus,
    ReservationStatus,
    UserRole,
)
from app.schemas.match import MatchInDB
from app.schemas.pitch import PitchInDB
from app.schemas.promotion import PromotionInDB
from app.schemas.reservation import ReservationInDB
from app.schemas.user import UserInDB

# A Monday, well clear of "now" in every test
SLOT_DAY = date(2030, 6, 3)
NOW = datetime(2030, 6, 1, 12, 0)

ALL_DAYS = [0, 1, 2, 3, 4, 5, 6]
ALL_HOURS = list(range(24))


def make_pitch(pitch_id=1, sport="fut7", base_price="50", **overrides) -> PitchInDB:
    data = {
        "id": pitch_id,
        "name": f"Pitch {pitch_id}",
        "sport": sport,
        "base_price": Decimal(base_price),
    }
    data.update(overrides)
    return PitchInDB(**data)


def make_actor(role=UserRole.PLAYER, user_id=100) -> UserInDB:
    return UserInDB(
        id=user_id,
        name=f"User {user_id}",
        email=f"user{user_id}@example.com",
        role=role,
    )


def make_reservation(
    reservation_id=10,
    pitch_id=1,
    when=datetime(2030, 6, 3, 18, 0),
    status=ReservationStatus.CONFIRMED,
    payment_status=PaymentStatus.PENDING,
    total_amount="70",
) -> ReservationInDB:
    return ReservationInDB(
        id=reservation_id,
        pitch_id=pitch_id,
        date=when,
        status=status,
        payment_status=payment_status,
        total_amount=Decimal(total_amount),
    )


def make_match(
    match_id=20,
    reservation_ref=10,
    team_a_ref=1,
    team_b_ref=None,
    manager_ref=200,
    status=MatchStatus.COLLECTING_PLAYERS,
    allow_challenges=False,
    allow_external_players=False,
    team_a_players=(),
    team_b_players=(),
) -> MatchInDB:
    return MatchInDB(
        id=match_id,
        reservation_ref=reservation_ref,
        team_a_ref=team_a_ref,
        team_b_ref=team_b_ref,
        manager_ref=manager_ref,
        status=status,
        allow_challenges=allow_challenges,
        allow_external_players=allow_external_players,
        team_a_players=list(team_a_players),
        team_b_players=list(team_b_players),
    )


def make_promotion(
    promotion_id=30,
    discount_percent=20,
    valid_from=date(2030, 1, 1),
    valid_to=date(2030, 12, 31),
    applicable_days=None,
    applicable_hours=None,
    pitch_ids=None,
) -> PromotionInDB:
    return PromotionInDB(
        id=promotion_id,
        name=f"Promo {promotion_id}",
        discount_percent=discount_percent,
        valid_from=valid_from,
        valid_to=valid_to,
        applicable_days=ALL_DAYS if applicable_days is None else applicable_days,
        applicable_hours=ALL_HOURS if applicable_hours is None else applicable_hours,
        pitch_ids=[] if pitch_ids is None else pitch_ids,
    )

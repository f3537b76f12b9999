from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest
import pytest_asyncio
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import BookingError, NotFoundError
from app.models import ChallengeInvitation, Match, Pitch, Promotion, Reservation, Team, User
from app.schemas.enums import (
    InvitationStatus,
    MatchEventType,
    MatchStatus,
    PaymentStatus,
    ReservationStatus,
    SlotStatus,
    TeamSide,
    UserRole,
)
from app.schemas.match import MatchEvent, MatchResult
from app.schemas.reservation import ReservationRequest
from app.schemas.slot import SlotInfo
from app.schemas.user import UserInDB
from app.services import booking_service as booking_module
from app.services.booking_service import booking_service
from app.services.schedule_service import resolve_pitch_slot
from tests.helpers import NOW, SLOT_DAY


@pytest_asyncio.fixture
async def world(db):
    """Owner, two managers with a team each, a few players, an admin and a referee."""
    users = {
        "owner": User(name="Olga", email="owner@example.com", role="OWNER"),
        "manager_a": User(name="Ana", email="ana@example.com", role="MANAGER"),
        "manager_b": User(name="Bo", email="bo@example.com", role="MANAGER"),
        "player": User(name="Pia", email="pia@example.com", role="PLAYER"),
        "player_2": User(name="Pim", email="pim@example.com", role="PLAYER"),
        "admin": User(name="Ada", email="ada@example.com", role="ADMIN"),
        "referee": User(name="Rui", email="rui@example.com", role="REFEREE"),
    }
    db.add_all(users.values())
    await db.flush()

    team_a = Team(name="Lions", manager_id=users["manager_a"].id)
    team_b = Team(name="Tigers", manager_id=users["manager_b"].id)
    pitch = Pitch(
        name="Arena",
        sport="fut5",
        base_price=Decimal("50"),
        owner_id=users["owner"].id,
    )
    db.add_all([team_a, team_b, pitch])
    db.add(
        Promotion(
            name="Evening",
            discount_percent=20,
            valid_from=date(2030, 1, 1),
            valid_to=date(2030, 12, 31),
            applicable_days=[0, 1, 2, 3, 4, 5, 6],
            applicable_hours=[18],
            pitch_ids=[],
        )
    )
    await db.commit()

    actors = {}
    for key, user in users.items():
        await db.refresh(user)
        actors[key] = UserInDB.model_validate(user)

    return SimpleNamespace(pitch_id=pitch.id, team_a=team_a.id, team_b=team_b.id, **actors)


def booking(world, time="18:00", **overrides):
    data = {"pitch_id": world.pitch_id, "day": SLOT_DAY, "time": time}
    data.update(overrides)
    return ReservationRequest(**data)


async def slot_status(db, world, actor, time="18:00"):
    info = await resolve_pitch_slot(db, world.pitch_id, actor, SLOT_DAY, time, now=NOW)
    return info.status


async def get_match(db, reservation_id):
    result = await db.execute(select(Match).where(Match.reservation_ref == reservation_id))
    return result.scalar_one_or_none()


async def open_practice_match(db, world, **flags):
    reservation = await booking_service.request_reservation(
        db, world.manager_a, booking(world, team_id=world.team_a, **flags), now=NOW
    )
    return reservation, await get_match(db, reservation.id)


# -- reservations ------------------------------------------------------------

async def test_player_booking_stores_discounted_price(db, world):
    reservation = await booking_service.request_reservation(
        db, world.player, booking(world), now=NOW
    )

    assert reservation.status == ReservationStatus.PENDING.value
    assert reservation.payment_status == PaymentStatus.PENDING.value
    assert reservation.total_amount == Decimal("40")
    assert reservation.promotion_id is not None
    assert reservation.player_ref == world.player.id
    assert reservation.date == datetime(2030, 6, 3, 18, 0)
    assert await get_match(db, reservation.id) is None
    assert await slot_status(db, world, world.player) == SlotStatus.PENDING


async def test_booked_slot_cannot_be_booked_again(db, world):
    await booking_service.request_reservation(db, world.player, booking(world), now=NOW)

    with pytest.raises(BookingError):
        await booking_service.request_reservation(db, world.player_2, booking(world), now=NOW)


async def test_past_slot_cannot_be_booked(db, world):
    with pytest.raises(BookingError):
        await booking_service.request_reservation(
            db, world.player, booking(world), now=datetime(2030, 6, 3, 19, 0)
        )


async def test_only_players_and_managers_book(db, world):
    with pytest.raises(BookingError):
        await booking_service.request_reservation(db, world.owner, booking(world), now=NOW)


async def test_invalid_time_label_is_a_booking_error(db, world):
    with pytest.raises(BookingError):
        await booking_service.request_reservation(
            db, world.player, booking(world, time="late"), now=NOW
        )


async def test_unknown_pitch(db, world):
    with pytest.raises(NotFoundError):
        await booking_service.request_reservation(
            db, world.player, booking(world, pitch_id=999), now=NOW
        )


async def test_manager_must_book_for_own_team(db, world):
    with pytest.raises(BookingError):
        await booking_service.request_reservation(db, world.manager_a, booking(world), now=NOW)
    with pytest.raises(BookingError):
        await booking_service.request_reservation(
            db, world.manager_a, booking(world, team_id=world.team_b), now=NOW
        )


async def test_manager_booking_opens_practice_match(db, world):
    reservation, match = await open_practice_match(
        db, world, allow_challenges=True, allow_external_players=True
    )

    assert reservation.manager_ref == world.manager_a.id
    assert match.team_a_ref == world.team_a
    assert match.team_b_ref is None
    assert match.manager_ref == world.manager_a.id
    assert match.status == MatchStatus.COLLECTING_PLAYERS.value
    assert match.allow_challenges and match.allow_external_players
    assert await slot_status(db, world, world.player) == SlotStatus.OPEN_FOR_PLAYERS
    assert await slot_status(db, world, world.manager_b) == SlotStatus.OPEN_FOR_TEAM
    assert await slot_status(db, world, world.manager_a) == SlotStatus.PENDING


async def test_approve_and_pay(db, world):
    reservation = await booking_service.request_reservation(
        db, world.player, booking(world), now=NOW
    )

    with pytest.raises(BookingError):
        await booking_service.approve_reservation(db, world.player, reservation.id)

    reservation = await booking_service.approve_reservation(db, world.owner, reservation.id)
    assert reservation.status == ReservationStatus.CONFIRMED.value

    with pytest.raises(BookingError):
        await booking_service.approve_reservation(db, world.owner, reservation.id)

    reservation = await booking_service.mark_reservation_paid(db, world.admin, reservation.id)
    assert reservation.payment_status == PaymentStatus.PAID.value
    assert await slot_status(db, world, world.player_2) == SlotStatus.BOOKED

    with pytest.raises(BookingError):
        await booking_service.mark_reservation_paid(db, world.owner, reservation.id)


async def test_cancel_frees_slot_and_cancels_match(db, world):
    reservation, match = await open_practice_match(db, world, allow_external_players=True)

    with pytest.raises(BookingError):
        await booking_service.cancel_reservation(db, world.player, reservation.id)

    reservation = await booking_service.cancel_reservation(db, world.manager_a, reservation.id)
    assert reservation.status == ReservationStatus.CANCELED.value

    await db.refresh(match)
    assert match.status == MatchStatus.CANCELLED.value
    assert await slot_status(db, world, world.player) == SlotStatus.AVAILABLE

    with pytest.raises(BookingError):
        await booking_service.cancel_reservation(db, world.owner, reservation.id)


async def test_missing_reservation(db, world):
    with pytest.raises(NotFoundError):
        await booking_service.approve_reservation(db, world.owner, 999)


# -- applications ------------------------------------------------------------

async def test_player_application_flow(db, world):
    _, match = await open_practice_match(db, world, allow_external_players=True)

    match = await booking_service.apply_to_match(db, world.player, match.id, now=NOW)
    assert match.player_applications == [world.player.id]

    with pytest.raises(BookingError):
        await booking_service.apply_to_match(db, world.player, match.id, now=NOW)

    with pytest.raises(BookingError):
        await booking_service.respond_to_application(
            db, world.manager_b, match.id, world.player.id, True
        )

    match = await booking_service.respond_to_application(
        db, world.manager_a, match.id, world.player.id, True
    )
    assert match.player_applications == []
    assert match.team_a_players == [world.player.id]
    assert match.status == MatchStatus.COLLECTING_PLAYERS.value

    with pytest.raises(BookingError):
        await booking_service.apply_to_match(db, world.player, match.id, now=NOW)


async def test_declined_application_is_dropped(db, world):
    _, match = await open_practice_match(db, world, allow_external_players=True)
    await booking_service.apply_to_match(db, world.player, match.id, now=NOW)

    match = await booking_service.respond_to_application(
        db, world.manager_a, match.id, world.player.id, False
    )
    assert match.player_applications == []
    assert match.team_a_players == []

    with pytest.raises(NotFoundError):
        await booking_service.respond_to_application(
            db, world.manager_a, match.id, world.player.id, True
        )


async def test_last_accepted_player_schedules_match(db, world):
    _, match = await open_practice_match(db, world, allow_external_players=True)
    match.team_a_players = list(range(1000, 1009))  # 9 of 10 for fut5
    await db.commit()

    await booking_service.apply_to_match(db, world.player, match.id, now=NOW)
    match = await booking_service.respond_to_application(
        db, world.manager_a, match.id, world.player.id, True
    )

    assert len(match.team_a_players) == 10
    assert match.status == MatchStatus.SCHEDULED.value
    assert await slot_status(db, world, world.player_2) == SlotStatus.PENDING
    with pytest.raises(BookingError):
        await booking_service.apply_to_match(db, world.player_2, match.id, now=NOW)


async def test_closed_match_rejects_applications(db, world):
    _, match = await open_practice_match(db, world, allow_external_players=False)

    with pytest.raises(BookingError):
        await booking_service.apply_to_match(db, world.player, match.id, now=NOW)


# -- challenges --------------------------------------------------------------

async def test_challenge_flow(db, world):
    _, match = await open_practice_match(db, world, allow_challenges=True)

    invitation = await booking_service.challenge_match(
        db, world.manager_b, match.id, world.team_b, now=NOW
    )
    assert invitation.status == InvitationStatus.PENDING.value
    assert invitation.manager_id == world.manager_b.id

    with pytest.raises(BookingError):
        await booking_service.challenge_match(db, world.manager_b, match.id, world.team_b, now=NOW)

    with pytest.raises(BookingError):
        await booking_service.respond_to_challenge(db, world.manager_b, invitation.id, True)

    invitation = await booking_service.respond_to_challenge(
        db, world.manager_a, invitation.id, True
    )
    assert invitation.status == InvitationStatus.ACCEPTED.value
    assert invitation.responded_at is not None

    await db.refresh(match)
    assert match.team_b_ref == world.team_b
    assert match.status == MatchStatus.SCHEDULED.value
    assert await slot_status(db, world, world.manager_b) != SlotStatus.OPEN_FOR_TEAM

    with pytest.raises(BookingError):
        await booking_service.respond_to_challenge(db, world.manager_a, invitation.id, False)


async def test_declined_challenge_leaves_match_open(db, world):
    _, match = await open_practice_match(db, world, allow_challenges=True)
    invitation = await booking_service.challenge_match(
        db, world.manager_b, match.id, world.team_b, now=NOW
    )

    invitation = await booking_service.respond_to_challenge(
        db, world.manager_a, invitation.id, False
    )

    assert invitation.status == InvitationStatus.DECLINED.value
    await db.refresh(match)
    assert match.team_b_ref is None
    assert await slot_status(db, world, world.manager_b) == SlotStatus.OPEN_FOR_TEAM


async def test_challenge_requires_own_team_and_open_match(db, world):
    _, match = await open_practice_match(db, world, allow_challenges=False)

    with pytest.raises(BookingError):
        await booking_service.challenge_match(db, world.manager_b, match.id, world.team_a, now=NOW)
    with pytest.raises(BookingError):
        await booking_service.challenge_match(db, world.manager_b, match.id, world.team_b, now=NOW)

    result = await db.execute(select(ChallengeInvitation))
    assert result.scalars().all() == []


# -- game flow ---------------------------------------------------------------

async def test_start_and_finish_match(db, world):
    reservation, match = await open_practice_match(db, world)

    with pytest.raises(BookingError):
        await booking_service.start_match(db, world.manager_a, match.id, now=NOW)

    match.team_a_players = list(range(1000, 1005))
    match.team_b_players = list(range(2000, 2005))
    await db.commit()

    with pytest.raises(BookingError):
        await booking_service.start_match(db, world.manager_a, match.id, now=NOW)

    await booking_service.mark_reservation_paid(db, world.owner, reservation.id)
    kickoff = datetime(2030, 6, 3, 18, 2)
    match = await booking_service.start_match(db, world.manager_a, match.id, now=kickoff)
    assert match.status == MatchStatus.IN_PROGRESS.value
    assert match.started_at == kickoff
    assert await slot_status(db, world, world.player) == SlotStatus.LIVE

    with pytest.raises(BookingError):
        await booking_service.start_match(db, world.manager_a, match.id, now=kickoff)

    match = await booking_service.finish_match(
        db, world.referee, match.id, MatchResult(score_a=3, score_b=2), now=kickoff
    )
    assert match.status == MatchStatus.FINISHED.value
    assert (match.score_a, match.score_b) == (3, 2)

    with pytest.raises(BookingError):
        await booking_service.finish_match(
            db, world.manager_a, match.id, MatchResult(score_a=0, score_b=0), now=kickoff
        )


async def test_post_game_payment_pitch_can_start_unpaid(db, world):
    pitch = (await db.execute(select(Pitch).where(Pitch.id == world.pitch_id))).scalar_one()
    pitch.allow_post_game_payments = True
    await db.commit()

    _, match = await open_practice_match(db, world)
    match.team_a_players = list(range(1000, 1010))
    await db.commit()

    match = await booking_service.start_match(db, world.manager_a, match.id, now=NOW)
    assert match.status == MatchStatus.IN_PROGRESS.value


async def test_only_the_match_manager_starts_it(db, world):
    _, match = await open_practice_match(db, world)

    with pytest.raises(BookingError):
        await booking_service.start_match(db, world.manager_b, match.id, now=NOW)
    with pytest.raises(NotFoundError):
        await booking_service.start_match(db, world.manager_a, 999, now=NOW)


async def test_active_reservations_are_unique_per_slot(db, world):
    slot = datetime(2030, 6, 3, 20, 0)
    db.add(Reservation(pitch_id=world.pitch_id, date=slot, status="Canceled", total_amount=Decimal("50")))
    db.add(Reservation(pitch_id=world.pitch_id, date=slot, status="Pending", total_amount=Decimal("50")))
    await db.commit()

    db.add(Reservation(pitch_id=world.pitch_id, date=slot, status="Confirmed", total_amount=Decimal("50")))
    with pytest.raises(IntegrityError):
        await db.commit()
    await db.rollback()


async def test_concurrent_booking_loses_at_the_database(db, world, monkeypatch):
    first = await booking_service.request_reservation(db, world.player, booking(world), now=NOW)
    first_id = first.id

    async def stale_available(*args, **kwargs):
        # What a request that resolved the slot before the first insert saw
        return SlotInfo(status=SlotStatus.AVAILABLE, price=Decimal("40"))

    monkeypatch.setattr(booking_module, "resolve_pitch_slot", stale_available)

    with pytest.raises(BookingError):
        await booking_service.request_reservation(db, world.player_2, booking(world), now=NOW)

    result = await db.execute(select(Reservation).where(Reservation.pitch_id == world.pitch_id))
    assert [r.id for r in result.scalars().all()] == [first_id]


# -- match events ------------------------------------------------------------

async def live_match(db, world):
    reservation, match = await open_practice_match(db, world)
    match.team_a_players = list(range(1000, 1005))
    match.team_b_players = list(range(2000, 2005))
    await db.commit()
    await booking_service.mark_reservation_paid(db, world.owner, reservation.id)
    return await booking_service.start_match(db, world.manager_a, match.id, now=NOW)


def goal(player_id, team, minute):
    return MatchEvent(type=MatchEventType.GOAL, player_id=player_id, team=team, minute=minute)


async def test_events_need_a_live_match(db, world):
    _, match = await open_practice_match(db, world)

    with pytest.raises(BookingError):
        await booking_service.record_event(db, world.manager_a, match.id, goal(1000, TeamSide.A, 5), now=NOW)


async def test_record_events_and_finish_from_goals(db, world):
    match = await live_match(db, world)

    await booking_service.record_event(db, world.manager_a, match.id, goal(1000, TeamSide.A, 5), now=NOW)
    await booking_service.record_event(db, world.referee, match.id, goal(2001, TeamSide.B, 17), now=NOW)
    await booking_service.record_event(
        db,
        world.referee,
        match.id,
        MatchEvent(type=MatchEventType.YELLOW_CARD, player_id=2001, team=TeamSide.B, minute=20),
        now=NOW,
    )
    match = await booking_service.record_event(
        db, world.manager_a, match.id, goal(1003, TeamSide.A, 33), now=NOW
    )

    events = booking_service.match_events(match)
    assert [e.type for e in events] == [
        MatchEventType.GOAL,
        MatchEventType.GOAL,
        MatchEventType.YELLOW_CARD,
        MatchEventType.GOAL,
    ]
    assert len({e.id for e in events}) == 4
    assert events[0].recorded_at == NOW

    match = await booking_service.finish_match(db, world.referee, match.id, now=NOW)
    assert match.status == MatchStatus.FINISHED.value
    assert (match.score_a, match.score_b) == (2, 1)

    with pytest.raises(BookingError):
        await booking_service.record_event(db, world.referee, match.id, goal(1000, TeamSide.A, 50), now=NOW)


async def test_explicit_result_overrides_events(db, world):
    match = await live_match(db, world)
    await booking_service.record_event(db, world.manager_a, match.id, goal(1000, TeamSide.A, 5), now=NOW)

    match = await booking_service.finish_match(
        db, world.manager_a, match.id, MatchResult(score_a=0, score_b=3), now=NOW
    )

    assert (match.score_a, match.score_b) == (0, 3)


async def test_event_rules(db, world):
    match = await live_match(db, world)

    with pytest.raises(BookingError):
        await booking_service.record_event(db, world.player, match.id, goal(1000, TeamSide.A, 5), now=NOW)
    with pytest.raises(BookingError):
        await booking_service.record_event(db, world.manager_a, match.id, goal(2000, TeamSide.A, 5), now=NOW)
    with pytest.raises(NotFoundError):
        await booking_service.record_event(db, world.manager_a, 999, goal(1000, TeamSide.A, 5), now=NOW)

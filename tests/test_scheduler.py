from datetime import datetime, timedelta
from decimal import Decimal

from sqlalchemy import select

from app.core.config import settings
from app.models import Match, Pitch, Reservation
from app.schemas.enums import MatchStatus
from app.services import scheduler as scheduler_module
from app.services.scheduler import is_match_overdue, match_scheduler

KICKOFF = datetime(2030, 6, 3, 18, 0)


def test_match_without_kickoff_is_never_overdue():
    assert not is_match_overdue(None, "fut5", KICKOFF + timedelta(days=1))


def test_overdue_after_game_time_plus_overrun():
    # fut5 games last 40 minutes
    assert not is_match_overdue(KICKOFF, "fut5", KICKOFF + timedelta(minutes=39))
    assert is_match_overdue(KICKOFF, "fut5", KICKOFF + timedelta(minutes=40))
    assert not is_match_overdue(KICKOFF, "fut5", KICKOFF + timedelta(minutes=50), overrun_minutes=15)
    assert is_match_overdue(KICKOFF, "fut5", KICKOFF + timedelta(minutes=55), overrun_minutes=15)


def test_unknown_sport_uses_default_game_time():
    assert not is_match_overdue(KICKOFF, "padel", KICKOFF + timedelta(minutes=89))
    assert is_match_overdue(KICKOFF, "padel", KICKOFF + timedelta(minutes=90))


async def _live_match(db, pitch, started_at, status=MatchStatus.IN_PROGRESS, hour_offset=0):
    reservation = Reservation(
        pitch_id=pitch.id,
        date=KICKOFF + timedelta(hours=hour_offset),
        status="Confirmed",
        payment_status="Paid",
        total_amount=Decimal("50"),
    )
    db.add(reservation)
    await db.flush()

    match = Match(
        reservation_ref=reservation.id,
        pitch_ref=pitch.id,
        date=KICKOFF,
        status=status.value,
        started_at=started_at,
        team_a_players=[],
        team_b_players=[],
        player_applications=[],
    )
    db.add(match)
    await db.flush()
    return match


async def test_finish_overdue_matches(db):
    pitch = Pitch(name="Arena", sport="fut5", base_price=Decimal("50"))
    db.add(pitch)
    await db.flush()

    overdue = await _live_match(db, pitch, KICKOFF)
    running = await _live_match(db, pitch, KICKOFF + timedelta(minutes=30), hour_offset=1)
    scheduled = await _live_match(db, pitch, None, status=MatchStatus.SCHEDULED, hour_offset=2)
    await db.commit()

    now = KICKOFF + timedelta(minutes=40 + settings.MATCH_OVERRUN_MINUTES)
    finished = await match_scheduler.finish_overdue_matches(db, now=now)

    assert finished == [overdue.id]

    result = await db.execute(select(Match.id, Match.status, Match.finished_at).order_by(Match.id))
    rows = {row.id: row for row in result.all()}
    assert rows[overdue.id].status == MatchStatus.FINISHED.value
    assert rows[overdue.id].finished_at == now
    assert rows[running.id].status == MatchStatus.IN_PROGRESS.value
    assert rows[scheduled.id].status == MatchStatus.SCHEDULED.value


async def test_finish_overdue_matches_with_nothing_live(db):
    assert await match_scheduler.finish_overdue_matches(db, now=KICKOFF) == []


def test_scheduler_starts_stopped():
    assert match_scheduler.running is False


async def test_one_failing_match_does_not_stop_the_batch(db, monkeypatch):
    pitch = Pitch(name="Arena", sport="fut5", base_price=Decimal("50"))
    db.add(pitch)
    await db.flush()

    broken = await _live_match(db, pitch, KICKOFF)
    healthy = await _live_match(db, pitch, KICKOFF + timedelta(minutes=1), hour_offset=1)
    await db.commit()
    broken_id, healthy_id = broken.id, healthy.id

    def overdue_unless_broken(started_at, sport, now, overrun_minutes=0):
        if started_at == KICKOFF:
            raise RuntimeError("corrupt match row")
        return is_match_overdue(started_at, sport, now, overrun_minutes)

    monkeypatch.setattr(scheduler_module, "is_match_overdue", overdue_unless_broken)

    finished = await match_scheduler.finish_overdue_matches(db, now=KICKOFF + timedelta(hours=3))

    assert finished == [healthy_id]
    result = await db.execute(select(Match.status).where(Match.id == broken_id))
    assert result.scalar_one() == MatchStatus.IN_PROGRESS.value

"""Background scheduler for the match lifecycle."""
import logging
from datetime import datetime, timedelta
from typing import List, Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import AsyncSessionLocal
from app.models.match import Match
from app.models.pitch import Pitch
from app.schemas.enums import MatchStatus
from app.services.schedule_service import pitch_local_now
from app.services.sports import SportLike, get_game_duration

logger = logging.getLogger(__name__)


def is_match_overdue(
    started_at: Optional[datetime],
    sport: SportLike,
    now: datetime,
    overrun_minutes: int = 0,
) -> bool:
    """
    Check whether a live match has outlasted its regulation time.

    Args:
        started_at: Kick-off time (pitch local)
        sport: Sport of the pitch, sets the game length
        now: Current time (pitch local)
        overrun_minutes: Grace period on top of the game length

    Returns:
        True if the match should be closed, False otherwise
    """
    if started_at is None:
        return False

    limit = started_at + timedelta(minutes=get_game_duration(sport) + overrun_minutes)
    return now >= limit


class MatchLifecycleScheduler:
    """Background scheduler that closes matches left running."""

    def __init__(self):
        """Initialize the scheduler."""
        self.scheduler = AsyncIOScheduler()
        self.running = False

    async def start(self):
        """Start the scheduler."""
        if self.running:
            logger.warning("Scheduler is already running")
            return

        logger.info("Starting match lifecycle scheduler")

        self.scheduler.add_job(
            self._check_live_matches,
            IntervalTrigger(minutes=settings.MATCH_CHECK_INTERVAL_MINUTES),
            id="match_lifecycle_job",
            name="Finish overdue matches",
            replace_existing=True,
        )

        self.scheduler.start()
        self.running = True
        logger.info("Match lifecycle scheduler started")

    async def stop(self):
        """Stop the scheduler."""
        if not self.running:
            return

        logger.info("Stopping match lifecycle scheduler")
        self.scheduler.shutdown(wait=False)
        self.running = False
        logger.info("Match lifecycle scheduler stopped")

    async def _check_live_matches(self):
        """Job entry point: one session per run."""
        logger.debug("Running match lifecycle check")

        async with AsyncSessionLocal() as db:
            try:
                await self.finish_overdue_matches(db)
            except Exception as e:
                logger.error(f"Error in match lifecycle check: {e}", exc_info=True)

    async def finish_overdue_matches(
        self, db: AsyncSession, now: Optional[datetime] = None
    ) -> List[int]:
        """
        Finish every live match whose game time plus overrun has elapsed.

        Args:
            db: Database session
            now: Override for the current pitch-local time

        Returns:
            IDs of the matches that were finished
        """
        result = await db.execute(
            select(
                Match.id,
                Match.started_at,
                Pitch.sport,
                Pitch.timezone,
                Pitch.name,
            )
            .join(Pitch, Match.pitch_ref == Pitch.id)
            .where(Match.status == MatchStatus.IN_PROGRESS.value)
            .order_by(Match.id)
        )
        # Column tuples only; nothing the loop reads may expire on rollback
        rows = result.all()

        logger.info(f"Found {len(rows)} live matches")

        finished = []
        for match_id, started_at, sport, timezone, pitch_name in rows:
            try:
                current = now or pitch_local_now(timezone)
                if not is_match_overdue(
                    started_at,
                    sport,
                    current,
                    settings.MATCH_OVERRUN_MINUTES,
                ):
                    logger.debug(f"Match {match_id}: still within game time")
                    continue

                await db.execute(
                    update(Match)
                    .where(
                        Match.id == match_id,
                        Match.status == MatchStatus.IN_PROGRESS.value,
                    )
                    .values(status=MatchStatus.FINISHED.value, finished_at=current)
                    .execution_options(synchronize_session=False)
                )
                await db.commit()
                finished.append(match_id)

                logger.info(f"Match {match_id} on pitch {pitch_name} closed after game time")

            except Exception as e:
                logger.error(f"Failed to finish match {match_id}: {e}", exc_info=True)
                await db.rollback()

        return finished


# Singleton instance
match_scheduler = MatchLifecycleScheduler()

"""Booking service: reservations, player applications, challenges and match flow."""
import logging
from datetime import datetime
from typing import List, Optional
from uuid import uuid4
import pytz
from sqlalchemy import select, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BookingError, NotFoundError
from app.models.match import ChallengeInvitation, Match
from app.models.pitch import Pitch
from app.models.reservation import Reservation
from app.models.user import Team
from app.schemas.enums import (
    InvitationStatus,
    MatchStatus,
    PaymentStatus,
    ReservationStatus,
    SlotStatus,
    TeamSide,
    UserRole,
)
from app.schemas.match import MatchEvent, MatchEventInDB, MatchResult
from app.schemas.reservation import ReservationRequest
from app.schemas.slot import SlotInfo
from app.schemas.user import UserInDB
from app.services.match_events import score_from_events
from app.services.schedule_service import get_pitch, pitch_local_now, resolve_pitch_slot
from app.services.slot_status import parse_hour_label, slot_start
from app.services.sports import get_player_capacity

logger = logging.getLogger(__name__)

BOOKING_ROLES = (UserRole.PLAYER, UserRole.MANAGER)


class BookingService:
    """Service for the write paths gated by slot status."""

    async def request_reservation(
        self,
        db: AsyncSession,
        actor: UserInDB,
        request: ReservationRequest,
        now: Optional[datetime] = None,
    ) -> Reservation:
        """
        Request a booking for an available slot.

        The stored total is the slot price at request time, promotion
        included. A manager books for one of their teams, which opens a
        practice match on the reservation.

        Args:
            db: Database session
            actor: Booking user
            request: Pitch, day, hour and match options
            now: Override for the pitch's current local time

        Returns:
            Created reservation
        """
        if actor.role not in BOOKING_ROLES:
            raise BookingError(f"Role {actor.role.value} cannot book pitches")

        try:
            hour = parse_hour_label(request.time)
        except ValueError:
            raise BookingError(f"Invalid slot time '{request.time}'")

        team = None
        if actor.role == UserRole.MANAGER:
            if request.team_id is None:
                raise BookingError("A manager must select a team for the booking")
            team = await self._get_team(db, request.team_id)
            if team.manager_id != actor.id:
                raise BookingError(f"Team {team.id} is not managed by user {actor.id}")

        info = await resolve_pitch_slot(
            db, request.pitch_id, actor, request.day, request.time, now=now
        )
        if info.status != SlotStatus.AVAILABLE:
            raise BookingError(
                f"Slot {request.day} {request.time} on pitch {request.pitch_id} "
                f"is not available ({info.status.value})"
            )

        start = slot_start(request.day, hour)
        reservation = Reservation(
            pitch_id=request.pitch_id,
            date=start,
            status=ReservationStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
            total_amount=info.price,
            promotion_id=info.promotion.id if info.promotion else None,
            actor_id=actor.id,
            actor_role=actor.role.value,
        )
        if team is not None:
            reservation.manager_ref = actor.id
        else:
            reservation.player_ref = actor.id

        db.add(reservation)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            logger.warning(
                f"Lost booking race for pitch {request.pitch_id} at {start} (user {actor.id})"
            )
            raise BookingError(
                f"Slot {request.day} {request.time} on pitch {request.pitch_id} was just booked"
            )

        if team is not None:
            db.add(
                Match(
                    reservation_ref=reservation.id,
                    pitch_ref=request.pitch_id,
                    date=start,
                    team_a_ref=team.id,
                    manager_ref=actor.id,
                    status=MatchStatus.COLLECTING_PLAYERS.value,
                    allow_challenges=request.allow_challenges,
                    allow_external_players=request.allow_external_players,
                    team_a_players=[],
                    team_b_players=[],
                    player_applications=[],
                )
            )

        await db.commit()
        await db.refresh(reservation)

        logger.info(
            f"User {actor.id} requested reservation {reservation.id} on pitch "
            f"{request.pitch_id} at {start} for {reservation.total_amount}"
        )
        return reservation

    async def approve_reservation(
        self, db: AsyncSession, actor: UserInDB, reservation_id: int
    ) -> Reservation:
        """Confirm a pending reservation. Pitch owner or admin only."""
        reservation = await self._get_reservation(db, reservation_id)
        pitch = await get_pitch(db, reservation.pitch_id)
        self._require_pitch_authority(actor, pitch)

        if reservation.status != ReservationStatus.PENDING.value:
            raise BookingError(
                f"Reservation {reservation_id} is {reservation.status}, not Pending"
            )

        reservation.status = ReservationStatus.CONFIRMED.value
        await db.commit()
        await db.refresh(reservation)

        logger.info(f"Reservation {reservation_id} confirmed by user {actor.id}")
        return reservation

    async def mark_reservation_paid(
        self, db: AsyncSession, actor: UserInDB, reservation_id: int
    ) -> Reservation:
        """Record that the payment provider settled the reservation."""
        reservation = await self._get_reservation(db, reservation_id)
        pitch = await get_pitch(db, reservation.pitch_id)
        self._require_pitch_authority(actor, pitch)

        if reservation.status == ReservationStatus.CANCELED.value:
            raise BookingError(f"Reservation {reservation_id} is canceled")
        if reservation.payment_status == PaymentStatus.PAID.value:
            raise BookingError(f"Reservation {reservation_id} is already paid")

        reservation.payment_status = PaymentStatus.PAID.value
        await db.commit()
        await db.refresh(reservation)

        logger.info(f"Reservation {reservation_id} marked paid by user {actor.id}")
        return reservation

    async def cancel_reservation(
        self, db: AsyncSession, actor: UserInDB, reservation_id: int
    ) -> Reservation:
        """
        Cancel a reservation and the match played on it.

        Allowed for the booking user, the pitch owner and admins. A match
        that already started cannot be canceled.
        """
        reservation = await self._get_reservation(db, reservation_id)
        pitch = await get_pitch(db, reservation.pitch_id)
        if reservation.actor_id != actor.id:
            self._require_pitch_authority(actor, pitch)

        if reservation.status == ReservationStatus.CANCELED.value:
            raise BookingError(f"Reservation {reservation_id} is already canceled")

        result = await db.execute(
            select(Match).where(Match.reservation_ref == reservation_id)
        )
        matches = result.scalars().all()
        for match in matches:
            if match.status in (MatchStatus.IN_PROGRESS.value, MatchStatus.FINISHED.value):
                raise BookingError(
                    f"Match {match.id} on reservation {reservation_id} has already started"
                )

        reservation.status = ReservationStatus.CANCELED.value
        for match in matches:
            match.status = MatchStatus.CANCELLED.value

        await db.commit()
        await db.refresh(reservation)

        logger.info(
            f"Reservation {reservation_id} canceled by user {actor.id} "
            f"({len(matches)} match(es) cancelled)"
        )
        return reservation

    async def apply_to_match(
        self,
        db: AsyncSession,
        actor: UserInDB,
        match_id: int,
        now: Optional[datetime] = None,
    ) -> Match:
        """Ask to join a practice match that is open for players."""
        match = await self._get_match(db, match_id)
        await self._require_slot_status(db, actor, match, SlotStatus.OPEN_FOR_PLAYERS, now)

        rostered = (match.team_a_players or []) + (match.team_b_players or [])
        if actor.id in rostered:
            raise BookingError(f"User {actor.id} already plays in match {match_id}")
        if actor.id in (match.player_applications or []):
            raise BookingError(f"User {actor.id} already applied to match {match_id}")

        match.player_applications = list(match.player_applications or []) + [actor.id]
        await db.commit()
        await db.refresh(match)

        logger.info(f"User {actor.id} applied to match {match_id}")
        return match

    async def respond_to_application(
        self,
        db: AsyncSession,
        actor: UserInDB,
        match_id: int,
        player_id: int,
        accepted: bool,
    ) -> Match:
        """
        Accept or decline a player application.

        Accepted players join team A. Once the roster reaches the sport's
        capacity the match is scheduled.
        """
        match = await self._get_match(db, match_id)
        self._require_match_manager(actor, match)

        applications = list(match.player_applications or [])
        if player_id not in applications:
            raise NotFoundError(f"No application from user {player_id} for match {match_id}")

        if accepted:
            pitch = await get_pitch(db, match.pitch_ref)
            capacity = get_player_capacity(pitch.sport)
            confirmed = len(match.team_a_players or []) + len(match.team_b_players or [])
            if confirmed >= capacity:
                raise BookingError(f"Match {match_id} is already full")

        applications.remove(player_id)
        match.player_applications = applications

        if accepted:
            match.team_a_players = list(match.team_a_players or []) + [player_id]
            if (
                confirmed + 1 >= capacity
                and match.status == MatchStatus.COLLECTING_PLAYERS.value
            ):
                match.status = MatchStatus.SCHEDULED.value
                logger.info(f"Match {match_id} reached {capacity} players and is scheduled")

        await db.commit()
        await db.refresh(match)

        logger.info(
            f"Application of user {player_id} to match {match_id} "
            f"{'accepted' if accepted else 'declined'} by user {actor.id}"
        )
        return match

    async def challenge_match(
        self,
        db: AsyncSession,
        actor: UserInDB,
        match_id: int,
        team_id: int,
        now: Optional[datetime] = None,
    ) -> ChallengeInvitation:
        """Offer one of the actor's teams as the opponent of a practice match."""
        match = await self._get_match(db, match_id)
        team = await self._get_team(db, team_id)
        if team.manager_id != actor.id:
            raise BookingError(f"Team {team_id} is not managed by user {actor.id}")
        if team.id == match.team_a_ref:
            raise BookingError("A team cannot challenge itself")

        await self._require_slot_status(db, actor, match, SlotStatus.OPEN_FOR_TEAM, now)

        result = await db.execute(
            select(ChallengeInvitation).where(
                and_(
                    ChallengeInvitation.match_id == match_id,
                    ChallengeInvitation.team_id == team_id,
                    ChallengeInvitation.status == InvitationStatus.PENDING.value,
                )
            )
        )
        if result.scalar_one_or_none():
            raise BookingError(f"Team {team_id} already challenged match {match_id}")

        invitation = ChallengeInvitation(
            match_id=match_id,
            team_id=team_id,
            manager_id=actor.id,
            status=InvitationStatus.PENDING.value,
        )
        db.add(invitation)
        await db.commit()
        await db.refresh(invitation)

        logger.info(f"Team {team_id} challenged match {match_id} (invitation {invitation.id})")
        return invitation

    async def respond_to_challenge(
        self,
        db: AsyncSession,
        actor: UserInDB,
        invitation_id: int,
        accepted: bool,
    ) -> ChallengeInvitation:
        """Accept or decline a challenge. Accepting fills team B and schedules the match."""
        result = await db.execute(
            select(ChallengeInvitation).where(ChallengeInvitation.id == invitation_id)
        )
        invitation = result.scalar_one_or_none()
        if not invitation:
            raise NotFoundError(f"Challenge invitation {invitation_id} not found")

        match = await self._get_match(db, invitation.match_id)
        self._require_match_manager(actor, match)

        if invitation.status != InvitationStatus.PENDING.value:
            raise BookingError(f"Challenge invitation {invitation_id} was already answered")

        if accepted:
            if match.team_b_ref is not None:
                raise BookingError(f"Match {match.id} already has an opponent")
            match.team_b_ref = invitation.team_id
            match.status = MatchStatus.SCHEDULED.value
            invitation.status = InvitationStatus.ACCEPTED.value
        else:
            invitation.status = InvitationStatus.DECLINED.value
        invitation.responded_at = datetime.now(pytz.UTC)

        await db.commit()
        await db.refresh(invitation)

        logger.info(
            f"Challenge {invitation_id} on match {match.id} {invitation.status} by user {actor.id}"
        )
        return invitation

    async def start_match(
        self,
        db: AsyncSession,
        actor: UserInDB,
        match_id: int,
        now: Optional[datetime] = None,
    ) -> Match:
        """
        Kick off a match.

        Needs a full roster and a paid reservation, unless the pitch lets
        teams pay after the game.
        """
        match = await self._get_match(db, match_id)
        self._require_match_manager(actor, match)

        if match.status not in (
            MatchStatus.SCHEDULED.value,
            MatchStatus.COLLECTING_PLAYERS.value,
        ):
            raise BookingError(f"Match {match_id} cannot start from status {match.status}")

        pitch = await get_pitch(db, match.pitch_ref)
        capacity = get_player_capacity(pitch.sport)
        confirmed = len(match.team_a_players or []) + len(match.team_b_players or [])
        if confirmed < capacity:
            raise BookingError(
                f"Match {match_id} needs {capacity} confirmed players, has {confirmed}"
            )

        reservation = await self._get_reservation(db, match.reservation_ref)
        if (
            reservation.payment_status != PaymentStatus.PAID.value
            and not pitch.allow_post_game_payments
        ):
            raise BookingError(f"Reservation {reservation.id} must be paid before the game")

        match.status = MatchStatus.IN_PROGRESS.value
        match.started_at = now or pitch_local_now(pitch.timezone)
        await db.commit()
        await db.refresh(match)

        logger.info(f"Match {match_id} started at {match.started_at}")
        return match

    async def record_event(
        self,
        db: AsyncSession,
        actor: UserInDB,
        match_id: int,
        event: MatchEvent,
        now: Optional[datetime] = None,
    ) -> Match:
        """
        Record a goal, assist or card on a live match.

        Args:
            db: Database session
            actor: Match manager, referee or admin
            match_id: Match ID
            event: What happened, to whom and in which minute
            now: Override for the recording time (pitch local)

        Returns:
            Match with the event appended
        """
        match = await self._get_match(db, match_id)
        self._require_match_official(actor, match)

        if match.status != MatchStatus.IN_PROGRESS.value:
            raise BookingError(f"Match {match_id} is not in progress")

        other_side = match.team_b_players if event.team == TeamSide.A else match.team_a_players
        if event.player_id in (other_side or []):
            raise BookingError(
                f"User {event.player_id} does not play for team {event.team.value} in match {match_id}"
            )

        if now is None:
            pitch = await get_pitch(db, match.pitch_ref)
            now = pitch_local_now(pitch.timezone)

        stored = MatchEventInDB(id=uuid4().hex, recorded_at=now, **event.model_dump())
        match.events = list(match.events or []) + [stored.model_dump(mode="json")]
        await db.commit()
        await db.refresh(match)

        logger.info(
            f"Match {match_id}: {event.type.value} by user {event.player_id} "
            f"(team {event.team.value}) at {event.minute}'"
        )
        return match

    async def finish_match(
        self,
        db: AsyncSession,
        actor: UserInDB,
        match_id: int,
        result: Optional[MatchResult] = None,
        now: Optional[datetime] = None,
    ) -> Match:
        """
        Record the final score of a live match.

        Without an explicit result the score is the goal count per side.
        """
        match = await self._get_match(db, match_id)
        self._require_match_official(actor, match)

        if match.status != MatchStatus.IN_PROGRESS.value:
            raise BookingError(f"Match {match_id} is not in progress")

        if result is None:
            result = score_from_events(self.match_events(match))
        if now is None:
            pitch = await get_pitch(db, match.pitch_ref)
            now = pitch_local_now(pitch.timezone)

        match.status = MatchStatus.FINISHED.value
        match.score_a = result.score_a
        match.score_b = result.score_b
        match.finished_at = now
        await db.commit()
        await db.refresh(match)

        logger.info(f"Match {match_id} finished {result.score_a}-{result.score_b}")
        return match

    async def _require_slot_status(
        self,
        db: AsyncSession,
        actor: UserInDB,
        match: Match,
        expected: SlotStatus,
        now: Optional[datetime],
    ) -> SlotInfo:
        """Resolve the match's slot for the actor and insist on one status."""
        if match.reservation_ref is None:
            raise BookingError(f"Match {match.id} has no reservation")
        reservation = await self._get_reservation(db, match.reservation_ref)

        info = await resolve_pitch_slot(
            db,
            reservation.pitch_id,
            actor,
            reservation.date.date(),
            f"{reservation.date.hour:02d}:00",
            now=now,
        )
        if info.status != expected or info.match is None or info.match.id != match.id:
            raise BookingError(
                f"Match {match.id} is not {expected.value} for user {actor.id} "
                f"(slot is {info.status.value})"
            )
        return info

    def _require_pitch_authority(self, actor: UserInDB, pitch: Pitch):
        if actor.role == UserRole.ADMIN:
            return
        if actor.role == UserRole.OWNER and pitch.owner_id == actor.id:
            return
        raise BookingError(f"User {actor.id} does not manage pitch {pitch.id}")

    def _require_match_manager(self, actor: UserInDB, match: Match):
        if actor.role == UserRole.ADMIN:
            return
        if match.manager_ref == actor.id:
            return
        raise BookingError(f"User {actor.id} does not manage match {match.id}")

    def _require_match_official(self, actor: UserInDB, match: Match):
        if actor.role == UserRole.REFEREE:
            return
        self._require_match_manager(actor, match)

    def match_events(self, match: Match) -> List[MatchEventInDB]:
        """Events stored on a match, parsed."""
        return [MatchEventInDB.model_validate(event) for event in match.events or []]

    async def _get_reservation(self, db: AsyncSession, reservation_id: int) -> Reservation:
        result = await db.execute(select(Reservation).where(Reservation.id == reservation_id))
        reservation = result.scalar_one_or_none()
        if not reservation:
            raise NotFoundError(f"Reservation {reservation_id} not found")
        return reservation

    async def _get_match(self, db: AsyncSession, match_id: int) -> Match:
        result = await db.execute(select(Match).where(Match.id == match_id))
        match = result.scalar_one_or_none()
        if not match:
            raise NotFoundError(f"Match {match_id} not found")
        return match

    async def _get_team(self, db: AsyncSession, team_id: int) -> Team:
        result = await db.execute(select(Team).where(Team.id == team_id))
        team = result.scalar_one_or_none()
        if not team:
            raise NotFoundError(f"Team {team_id} not found")
        return team


# Singleton instance
booking_service = BookingService()

"""Match endpoints: applications, challenges and game flow."""
from typing import List, Optional
from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_actor
from app.core.database import get_db
from app.core.exceptions import BookingError, NotFoundError
from app.models.match import ChallengeInvitation, Match
from app.schemas.enums import MatchStatus
from app.schemas.match import (
    ApplicationResponse,
    ChallengeCreate,
    ChallengeInvitationInDB,
    ChallengeResponse,
    MatchEvent,
    MatchInDB,
    MatchResult,
    PlayerMatchStats,
)
from app.schemas.user import UserInDB
from app.services.booking_service import booking_service
from app.services.match_events import tally_player_stats

router = APIRouter(prefix="/matches", tags=["matches"])


@router.get("", response_model=List[MatchInDB])
async def list_matches(
    status: MatchStatus = None,
    pitch_id: int = None,
    skip: int = 0,
    limit: int = 100,
    db: AsyncSession = Depends(get_db),
):
    """List matches, optionally filtered by status and pitch."""
    query = select(Match)
    if status is not None:
        query = query.where(Match.status == status.value)
    if pitch_id is not None:
        query = query.where(Match.pitch_ref == pitch_id)

    result = await db.execute(query.order_by(Match.date).offset(skip).limit(limit))
    return result.scalars().all()


@router.get("/{match_id}", response_model=MatchInDB)
async def get_match(
    match_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Get a specific match by ID."""
    result = await db.execute(select(Match).where(Match.id == match_id))
    match = result.scalar_one_or_none()

    if not match:
        raise HTTPException(status_code=404, detail="Match not found")

    return match


@router.post("/{match_id}/applications", response_model=MatchInDB)
async def apply_to_match(
    match_id: int,
    actor: UserInDB = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    """
    Apply to join a practice match.

    Only possible while the match's slot shows OpenForPlayers to the actor.
    """
    try:
        return await booking_service.apply_to_match(db, actor, match_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except BookingError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/{match_id}/applications/{player_id}", response_model=MatchInDB)
async def respond_to_application(
    match_id: int,
    player_id: int,
    response: ApplicationResponse,
    actor: UserInDB = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    """Accept or decline a player's application (match manager)."""
    try:
        return await booking_service.respond_to_application(
            db, actor, match_id, player_id, response.accepted
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except BookingError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post(
    "/{match_id}/challenges",
    response_model=ChallengeInvitationInDB,
    status_code=201,
)
async def challenge_match(
    match_id: int,
    challenge: ChallengeCreate,
    actor: UserInDB = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    """
    Challenge a practice match with one of the actor's teams.

    Only possible while the match's slot shows OpenForTeam to the actor.
    """
    try:
        return await booking_service.challenge_match(
            db, actor, match_id, challenge.team_id
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except BookingError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{match_id}/challenges", response_model=List[ChallengeInvitationInDB])
async def list_challenges(
    match_id: int,
    db: AsyncSession = Depends(get_db),
):
    """List challenges received by a match."""
    result = await db.execute(
        select(ChallengeInvitation)
        .where(ChallengeInvitation.match_id == match_id)
        .order_by(ChallengeInvitation.id)
    )
    return result.scalars().all()


@router.post("/challenges/{invitation_id}/respond", response_model=ChallengeInvitationInDB)
async def respond_to_challenge(
    invitation_id: int,
    response: ChallengeResponse,
    actor: UserInDB = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    """Accept or decline a challenge (match manager)."""
    try:
        return await booking_service.respond_to_challenge(
            db, actor, invitation_id, response.accepted
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except BookingError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/{match_id}/start", response_model=MatchInDB)
async def start_match(
    match_id: int,
    actor: UserInDB = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    """Start a match once the roster is full and the booking is paid."""
    try:
        return await booking_service.start_match(db, actor, match_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except BookingError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/{match_id}/events", response_model=MatchInDB, status_code=201)
async def record_event(
    match_id: int,
    event: MatchEvent,
    actor: UserInDB = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    """Record a goal, assist or card while the match is live."""
    try:
        return await booking_service.record_event(db, actor, match_id, event)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except BookingError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{match_id}/stats", response_model=List[PlayerMatchStats])
async def get_match_stats(
    match_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Per-player goals, assists and cards of a match."""
    result = await db.execute(select(Match).where(Match.id == match_id))
    match = result.scalar_one_or_none()

    if not match:
        raise HTTPException(status_code=404, detail="Match not found")

    return tally_player_stats(booking_service.match_events(match))


@router.post("/{match_id}/finish", response_model=MatchInDB)
async def finish_match(
    match_id: int,
    result: Optional[MatchResult] = Body(default=None),
    actor: UserInDB = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    """Record the final score of a live match; without a body the goal events decide it."""
    try:
        return await booking_service.finish_match(db, actor, match_id, result)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except BookingError as e:
        raise HTTPException(status_code=400, detail=str(e))

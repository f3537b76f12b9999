"""Match schemas."""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime

from app.schemas.enums import InvitationStatus, MatchEventType, MatchStatus, TeamSide


class MatchEvent(BaseModel):
    """Schema for recording a goal, assist or card during a live match."""

    type: MatchEventType
    player_id: int
    team: TeamSide
    minute: int = Field(ge=0)


class MatchEventInDB(MatchEvent):
    """Schema for an event stored on a match."""

    id: str
    recorded_at: datetime


class MatchInDB(BaseModel):
    """Schema for match from database."""

    id: int
    reservation_ref: Optional[int] = None
    pitch_ref: Optional[int] = None
    date: Optional[datetime] = None
    team_a_ref: Optional[int] = None
    team_b_ref: Optional[int] = None
    manager_ref: Optional[int] = None
    status: MatchStatus = MatchStatus.COLLECTING_PLAYERS
    allow_challenges: bool = False
    allow_external_players: bool = False
    team_a_players: List[int] = Field(default_factory=list)
    team_b_players: List[int] = Field(default_factory=list)
    player_applications: List[int] = Field(default_factory=list)
    events: List[MatchEventInDB] = Field(default_factory=list)
    score_a: Optional[int] = None
    score_b: Optional[int] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_practice_match(self) -> bool:
        """Only team A is set, so the match is open to a challenger or loose players."""
        return self.team_a_ref is not None and self.team_b_ref is None

    @property
    def confirmed_players(self) -> int:
        return len(self.team_a_players) + len(self.team_b_players)


class ApplicationResponse(BaseModel):
    """Schema for a manager's answer to a player application."""

    accepted: bool


class ChallengeCreate(BaseModel):
    """Schema for challenging a practice match with one of the actor's teams."""

    team_id: int


class ChallengeResponse(BaseModel):
    """Schema for a manager's answer to a challenge."""

    accepted: bool


class ChallengeInvitationInDB(BaseModel):
    """Schema for challenge invitation from database."""

    id: int
    match_id: int
    team_id: int
    manager_id: int
    status: InvitationStatus
    created_at: Optional[datetime] = None
    responded_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class MatchResult(BaseModel):
    """Schema for the final score of a match."""

    score_a: int = Field(ge=0)
    score_b: int = Field(ge=0)


class PlayerMatchStats(BaseModel):
    """Per-player totals of the events of one match."""

    player_id: int
    goals: int = 0
    assists: int = 0
    yellow_cards: int = 0
    red_cards: int = 0

"""API schemas."""
from app.schemas.enums import (
    UserRole,
    Sport,
    ReservationStatus,
    PaymentStatus,
    MatchStatus,
    InvitationStatus,
    SlotStatus,
    MatchEventType,
    TeamSide,
)
from app.schemas.user import UserCreate, UserInDB, TeamCreate, TeamInDB
from app.schemas.pitch import PitchCreate, PitchUpdate, PitchInDB
from app.schemas.promotion import PromotionCreate, PromotionUpdate, PromotionInDB
from app.schemas.reservation import ReservationRequest, ReservationInDB
from app.schemas.match import (
    MatchInDB,
    ApplicationResponse,
    ChallengeCreate,
    ChallengeResponse,
    ChallengeInvitationInDB,
    MatchResult,
    MatchEvent,
    MatchEventInDB,
    PlayerMatchStats,
)
from app.schemas.slot import SlotInfo, ScheduleSlot, PitchScheduleResponse

__all__ = [
    "UserRole",
    "Sport",
    "ReservationStatus",
    "PaymentStatus",
    "MatchStatus",
    "InvitationStatus",
    "SlotStatus",
    "MatchEventType",
    "TeamSide",
    "UserCreate",
    "UserInDB",
    "TeamCreate",
    "TeamInDB",
    "PitchCreate",
    "PitchUpdate",
    "PitchInDB",
    "PromotionCreate",
    "PromotionUpdate",
    "PromotionInDB",
    "ReservationRequest",
    "ReservationInDB",
    "MatchInDB",
    "ApplicationResponse",
    "ChallengeCreate",
    "ChallengeResponse",
    "ChallengeInvitationInDB",
    "MatchResult",
    "MatchEvent",
    "MatchEventInDB",
    "PlayerMatchStats",
    "SlotInfo",
    "ScheduleSlot",
    "PitchScheduleResponse",
]

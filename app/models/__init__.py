"""Database models."""
from app.models.user import User, Team
from app.models.pitch import Pitch
from app.models.promotion import Promotion
from app.models.reservation import Reservation
from app.models.match import Match, ChallengeInvitation

__all__ = ["User", "Team", "Pitch", "Promotion", "Reservation", "Match", "ChallengeInvitation"]

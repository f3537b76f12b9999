"""Closed value sets shared by schemas and services."""
from enum import Enum


class UserRole(str, Enum):
    PLAYER = "PLAYER"
    MANAGER = "MANAGER"
    OWNER = "OWNER"
    PROMOTER = "PROMOTER"
    REFEREE = "REFEREE"
    ADMIN = "ADMIN"


class Sport(str, Enum):
    FUT5 = "fut5"
    FUTSAL = "futsal"
    FUT7 = "fut7"
    FUT11 = "fut11"


class ReservationStatus(str, Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    SCHEDULED = "Scheduled"
    CANCELED = "Canceled"


class PaymentStatus(str, Enum):
    PAID = "Paid"
    PENDING = "Pending"
    OVERDUE = "Overdue"
    CANCELLED = "Cancelled"


class MatchStatus(str, Enum):
    COLLECTING_PLAYERS = "Collecting players"
    SCHEDULED = "Scheduled"
    IN_PROGRESS = "InProgress"
    FINISHED = "Finished"
    CANCELLED = "Cancelled"


class InvitationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class SlotStatus(str, Enum):
    AVAILABLE = "Available"
    PENDING = "Pending"
    BOOKED = "Booked"
    OPEN_FOR_PLAYERS = "OpenForPlayers"
    OPEN_FOR_TEAM = "OpenForTeam"
    PAST = "Past"
    LIVE = "Live"


class MatchEventType(str, Enum):
    GOAL = "Goal"
    ASSIST = "Assist"
    YELLOW_CARD = "YellowCard"
    RED_CARD = "RedCard"


class TeamSide(str, Enum):
    A = "A"
    B = "B"

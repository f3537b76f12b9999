"""Match and challenge invitation models."""
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, DateTime, JSON
from sqlalchemy.sql import func
from app.core.database import Base


class Match(Base):
    """Represents a game played on a reservation."""

    __tablename__ = "matches"

    id = Column(Integer, primary_key=True, index=True)
    reservation_ref = Column(Integer, ForeignKey("reservations.id", ondelete="CASCADE"), nullable=True, index=True)
    pitch_ref = Column(Integer, ForeignKey("pitches.id", ondelete="CASCADE"), nullable=True, index=True)
    date = Column(DateTime, nullable=True)
    team_a_ref = Column(Integer, ForeignKey("teams.id", ondelete="SET NULL"), nullable=True)
    team_b_ref = Column(Integer, ForeignKey("teams.id", ondelete="SET NULL"), nullable=True)
    manager_ref = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    status = Column(String, nullable=False, default="Collecting players")  # Collecting players, Scheduled, InProgress, Finished, Cancelled
    allow_challenges = Column(Boolean, default=False, nullable=False)
    allow_external_players = Column(Boolean, default=False, nullable=False)
    # Lists of user IDs; always reassign, never mutate in place
    team_a_players = Column(JSON, nullable=False, default=list)
    team_b_players = Column(JSON, nullable=False, default=list)
    player_applications = Column(JSON, nullable=False, default=list)
    # Goal, assist and card records: {id, type, player_id, team, minute, recorded_at}
    events = Column(JSON, nullable=False, default=list)
    score_a = Column(Integer, nullable=True)
    score_b = Column(Integer, nullable=True)
    started_at = Column(DateTime, nullable=True)
    finished_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class ChallengeInvitation(Base):
    """Represents a manager's offer to play a practice match as team B."""

    __tablename__ = "challenge_invitations"

    id = Column(Integer, primary_key=True, index=True)
    match_id = Column(Integer, ForeignKey("matches.id", ondelete="CASCADE"), nullable=False, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    manager_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    status = Column(String, nullable=False, default="pending")  # pending, accepted, declined
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    responded_at = Column(DateTime(timezone=True), nullable=True)

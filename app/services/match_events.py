"""Derived results of the events recorded during a match."""
from typing import Dict, List, Sequence

from app.schemas.enums import MatchEventType, TeamSide
from app.schemas.match import MatchEvent, MatchResult, PlayerMatchStats

STAT_FIELDS = {
    MatchEventType.GOAL: "goals",
    MatchEventType.ASSIST: "assists",
    MatchEventType.YELLOW_CARD: "yellow_cards",
    MatchEventType.RED_CARD: "red_cards",
}


def score_from_events(events: Sequence[MatchEvent]) -> MatchResult:
    """Final score as the count of goals per side."""
    goals = [event.team for event in events if event.type == MatchEventType.GOAL]
    return MatchResult(
        score_a=goals.count(TeamSide.A),
        score_b=goals.count(TeamSide.B),
    )


def tally_player_stats(events: Sequence[MatchEvent]) -> List[PlayerMatchStats]:
    """Per-player goals, assists and cards, in order of first appearance."""
    totals: Dict[int, PlayerMatchStats] = {}
    for event in events:
        stats = totals.setdefault(event.player_id, PlayerMatchStats(player_id=event.player_id))
        field = STAT_FIELDS[event.type]
        setattr(stats, field, getattr(stats, field) + 1)
    return list(totals.values())

"""Per-sport rules: roster capacity and game length."""
from typing import Optional, Union

from app.schemas.enums import Sport

SportLike = Optional[Union[Sport, str]]

PLAYER_CAPACITY = {
    Sport.FUT5: 10,
    Sport.FUTSAL: 10,
    Sport.FUT7: 14,
    Sport.FUT11: 22,
}

GAME_DURATION_MINUTES = {
    Sport.FUT11: 90,
    Sport.FUT7: 50,
    Sport.FUT5: 40,
    Sport.FUTSAL: 40,
}

DEFAULT_GAME_DURATION_MINUTES = 90


def _as_sport(sport: SportLike) -> Optional[Sport]:
    if sport is None:
        return None
    try:
        return Sport(sport)
    except ValueError:
        return None


def get_player_capacity(sport: SportLike) -> int:
    """
    Number of players (both sides) a game on this sport needs.

    Unknown or missing sports have no capacity, which keeps a match
    closed to external players.
    """
    known = _as_sport(sport)
    if known is None:
        return 0
    return PLAYER_CAPACITY[known]


def get_game_duration(sport: SportLike) -> int:
    """Regulation game length in minutes."""
    known = _as_sport(sport)
    return GAME_DURATION_MINUTES.get(known, DEFAULT_GAME_DURATION_MINUTES)

"""Service-level errors.

Both derive from ValueError so callers that only care about "the request
was wrong" can keep catching ValueError.
"""


class NotFoundError(ValueError):
    """A referenced pitch, reservation, match, team or user does not exist."""


class BookingError(ValueError):
    """A write path was refused by the booking rules."""

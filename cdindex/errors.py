"""Exceptions raised by the moderation services.

Vote outcomes and apply failures are never raised; they end up as the
terminal status of a modification. These exceptions cover malformed input
only, and the routes turn them into 400 responses.
"""


class ModerationError(Exception):
    """Base class for moderation errors."""


class InvalidModificationError(ModerationError):
    """A submission names an unknown type, target row, artist or moderator."""


class UnknownModeratorError(ModerationError):
    """A submission or vote comes from a moderator that does not exist."""

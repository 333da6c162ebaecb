"""Exception hierarchy for the game core."""

from __future__ import annotations


class GameError(Exception):
    """Base class for all expected, displayable game failures."""


class ValidationError(GameError):
    """Input rejected before any remote call (empty question list, blank answer)."""


class NotFoundError(GameError):
    """The session id is absent, unparsable or unknown to the store."""


class SubmissionError(GameError):
    """A remote write (answer insert or session update) failed."""


class InvalidTransitionError(GameError):
    """A state-machine operation was called in a state that does not allow it."""


class EndOfSequenceError(InvalidTransitionError):
    """Advance was requested at the last question; End must be used instead."""


class StoreError(GameError):
    """Persistence or transport failure inside a store implementation."""


class ConfigurationError(GameError):
    """Required configuration for a collaborator is missing or malformed."""

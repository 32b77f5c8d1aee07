# scorer_api/errors.py
from __future__ import annotations


class ScoringError(Exception):
    """Base class for every error raised by the scoring engine."""
    pass


class ValidationError(ScoringError):
    """Malformed configuration or roster input (blank name, empty team, ...)."""
    pass


class IllegalStateError(ScoringError):
    """Operation invoked while the match is in a status that does not allow it."""
    pass


class MissingParticipantsError(ScoringError):
    """Delivery recorded before a striker and bowler were selected."""
    pass


class InvalidDeliveryError(ScoringError):
    """Contradictory or out-of-range delivery input."""
    pass


class StoreError(Exception):
    """Raised when the document store file cannot be read back."""
    pass

from __future__ import annotations


class SalesFitError(Exception):
    """Base exception for scoring and assessment errors."""


class InvalidAnswerError(SalesFitError, ValueError):
    """Raised when a multiple-choice answer carries points outside the per-question cap."""


class AttemptTransitionError(SalesFitError):
    """Raised when an event does not apply to the attempt's current state."""


class CatalogError(SalesFitError):
    """Raised when a question bank or job catalog file cannot be loaded."""

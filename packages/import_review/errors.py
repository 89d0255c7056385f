"""Exception types raised by the import review engine.

Every error derives from :class:`ImportReviewError` and also from the closest
builtin (``ValueError``/``RuntimeError``) so callers that already catch those
keep working.
"""

from __future__ import annotations


class ImportReviewError(Exception):
    """Base class for import review failures."""


class ReviewValidationError(ImportReviewError, ValueError):
    """Request rejected before any mutation (e.g., empty key set or batch)."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


class ClassifierInputError(ImportReviewError, ValueError):
    """A candidate reached the classifier without an external id.

    The parser is expected to supply (or synthesize) one for every row, so
    this signals a programming error upstream. Not retryable.
    """


class FinalizeWriteFailure(ImportReviewError, RuntimeError):
    """The ledger writer failed while completing a review.

    Staging is left untouched; calling ``complete_review`` again is safe.
    """

    retryable = True


__all__ = [
    "ClassifierInputError",
    "FinalizeWriteFailure",
    "ImportReviewError",
    "ReviewValidationError",
]

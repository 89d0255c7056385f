"""Public interface for the ``import_review`` package.

Bank-statement import review: classify uploaded transactions against the
ledger and pending imports, keep per-row selection server-side, and accept the
selected rows into the ledger. Only symbol re-exports live here.
"""

from .api import (
    complete_review,
    delete_all_review,
    deselect_all,
    get_review_page,
    get_summary,
    import_batch,
    select_all,
    set_selection,
)
from .errors import (
    ClassifierInputError,
    FinalizeWriteFailure,
    ImportReviewError,
    ReviewValidationError,
)
from .ledger import LedgerWriter, SqlLedgerWriter
from .models import (
    CompleteReviewResult,
    DuplicateStatus,
    ImportCandidate,
    ImportResult,
    LedgerEntry,
    PageMetadata,
    ParsingError,
    ReviewItem,
    ReviewPage,
    ReviewSummary,
)

__all__ = [
    # API
    "import_batch",
    "get_review_page",
    "set_selection",
    "select_all",
    "deselect_all",
    "get_summary",
    "complete_review",
    "delete_all_review",
    # Collaborators
    "LedgerWriter",
    "SqlLedgerWriter",
    # Models / types
    "CompleteReviewResult",
    "DuplicateStatus",
    "ImportCandidate",
    "ImportResult",
    "LedgerEntry",
    "PageMetadata",
    "ParsingError",
    "ReviewItem",
    "ReviewPage",
    "ReviewSummary",
    # Errors
    "ClassifierInputError",
    "FinalizeWriteFailure",
    "ImportReviewError",
    "ReviewValidationError",
]

"""Public operations of the import review engine.

Each function here is one request-level operation: it opens a single
``db.client.session_scope`` (one database transaction), does its work through
the session-bound components, and commits or rolls back as a unit. Every
function takes the tenant explicitly; nothing reads an ambient tenant.

``database_url`` falls back to the ``DATABASE_URL`` environment variable.
"""

from __future__ import annotations

import uuid
from collections.abc import Collection, Iterable, Sequence

from db.client import session_scope

from .duplicates import DuplicateClassifier
from .errors import ReviewValidationError
from .finalize import ReviewFinalizer
from .ledger import LedgerWriter
from .logging_setup import get_logger, tenant_log
from .models import (
    CompleteReviewResult,
    DuplicateStatus,
    ImportCandidate,
    ImportResult,
    ParsingError,
    ParsingErrorDto,
    ReviewPage,
    ReviewSummary,
)
from .queries import ReviewQueryService
from .selection import SelectionManager
from .staging import StagingStore

_logger = get_logger("import_review.api")


def import_batch(
    tenant_id: str,
    candidates: Sequence[ImportCandidate],
    *,
    parsing_errors: Iterable[ParsingError] = (),
    database_url: str | None = None,
) -> ImportResult:
    """Classify a parsed batch and stage it for review.

    Parsing errors from the file parser are passed through into the result so
    partial success is reported together with what was skipped.
    """

    errors = [ParsingErrorDto(message=e.message, code=e.code) for e in parsing_errors]
    if not candidates:
        tenant_log(_logger, tenant_id).warning(
            "import_batch rejected: empty batch parsing_errors=%d",
            len(errors),
        )
        raise ReviewValidationError("candidates", "At least one transaction is required to import.")

    tenant_log(_logger, tenant_id).debug("import_batch starting candidates=%d", len(candidates))
    with session_scope(database_url=database_url) as session:
        classifications = DuplicateClassifier(session).classify(tenant_id, candidates)
        StagingStore(session).insert_batch(tenant_id, zip(candidates, classifications, strict=True))

    counts = {status: 0 for status in DuplicateStatus}
    for c in classifications:
        counts[c.status] += 1

    result = ImportResult(
        imported_count=len(candidates),
        new_count=counts[DuplicateStatus.NEW],
        exact_duplicate_count=counts[DuplicateStatus.EXACT_DUPLICATE],
        potential_duplicate_count=counts[DuplicateStatus.POTENTIAL_DUPLICATE],
        errors=errors,
    )
    tenant_log(_logger, tenant_id).info(
        "import_batch imported=%d new=%d exact=%d potential=%d parsing_errors=%d",
        result.imported_count,
        result.new_count,
        result.exact_duplicate_count,
        result.potential_duplicate_count,
        len(errors),
    )
    return result


def get_review_page(
    tenant_id: str,
    page_number: int | None = None,
    page_size: int | None = None,
    *,
    database_url: str | None = None,
) -> ReviewPage:
    with session_scope(database_url=database_url) as session:
        page = ReviewQueryService(session).get_page(tenant_id, page_number, page_size)
    tenant_log(_logger, tenant_id).debug(
        "get_review_page page=%d size=%d items=%d",
        page.page_number,
        page.page_size,
        len(page.items),
    )
    return page


def set_selection(
    tenant_id: str,
    keys: Collection[uuid.UUID],
    selected: bool,
    *,
    database_url: str | None = None,
) -> None:
    """Select or deselect specific staged rows. Empty ``keys`` is rejected."""

    with session_scope(database_url=database_url) as session:
        SelectionManager(session).set_selection(tenant_id, keys, selected)


def select_all(tenant_id: str, *, database_url: str | None = None) -> None:
    with session_scope(database_url=database_url) as session:
        SelectionManager(session).select_all(tenant_id)


def deselect_all(tenant_id: str, *, database_url: str | None = None) -> None:
    with session_scope(database_url=database_url) as session:
        SelectionManager(session).deselect_all(tenant_id)


def get_summary(tenant_id: str, *, database_url: str | None = None) -> ReviewSummary:
    with session_scope(database_url=database_url) as session:
        return ReviewQueryService(session).get_summary(tenant_id)


def complete_review(
    tenant_id: str,
    *,
    ledger_writer: LedgerWriter | None = None,
    database_url: str | None = None,
) -> CompleteReviewResult:
    """Accept the selected rows into the ledger and clear staging.

    Raises :class:`~import_review.errors.FinalizeWriteFailure` (retryable)
    when the ledger write fails. Staging is then left exactly as it was.
    """

    with session_scope(database_url=database_url) as session:
        return ReviewFinalizer(session, ledger_writer).complete_review(tenant_id)


def delete_all_review(tenant_id: str, *, database_url: str | None = None) -> int:
    """Discard every staged row for the tenant; returns how many were removed."""

    with session_scope(database_url=database_url) as session:
        return ReviewFinalizer(session).delete_all_review(tenant_id)


__all__ = [
    "complete_review",
    "delete_all_review",
    "deselect_all",
    "get_review_page",
    "get_summary",
    "import_batch",
    "select_all",
    "set_selection",
]

"""Completing or discarding an import review.

There is one staging area per tenant. It is ``OPEN`` while rows are pending
(new uploads merge into it), ``FINALIZING`` while ``complete_review`` runs, and
``CLOSED`` once staging has been purged. A closed review re-opens on the next
upload.

Nothing stores this state. ``ReviewFinalizer.state`` only tracks one
finalizer instance, and ``api`` builds a new instance per request, so the
attribute is visible to the caller holding that instance and in debug logs.
Across requests the staging rows themselves are the state: rows present
means ``OPEN``, none means ``CLOSED``.

``complete_review`` steps, all inside the caller's transaction:

1. count every staged row (``total_before``);
2. read *all* selected rows, unpaginated;
3. hand them to the ledger writer in one call, keeping each row's key;
4. delete every staged row, selected or not;
5. report ``accepted = len(selected)`` and ``rejected = total_before - accepted``.

If step 3 raises, step 4 never runs. The error is re-raised as
:class:`~import_review.errors.FinalizeWriteFailure` and the surrounding
``session_scope`` rolls back, so the review can be retried as-is.
"""

from __future__ import annotations

import enum

from sqlalchemy.orm import Session

from .errors import FinalizeWriteFailure
from .ledger import LedgerWriter, SqlLedgerWriter
from .logging_setup import get_logger, tenant_log
from .models import CompleteReviewResult, LedgerEntry
from .staging import StagingStore

_logger = get_logger("import_review.finalize")


class ReviewState(enum.StrEnum):
    OPEN = "open"
    FINALIZING = "finalizing"
    CLOSED = "closed"


class ReviewFinalizer:
    def __init__(self, session: Session, ledger_writer: LedgerWriter | None = None) -> None:
        self._session = session
        self._store = StagingStore(session)
        self._writer: LedgerWriter = ledger_writer or SqlLedgerWriter()
        self.state = ReviewState.OPEN

    def _transition(self, tenant_id: str, new_state: ReviewState) -> None:
        tenant_log(_logger, tenant_id).debug("review %s -> %s", self.state, new_state)
        self.state = new_state

    def complete_review(self, tenant_id: str) -> CompleteReviewResult:
        """Accept every selected staged row and purge staging.

        Takes no selection argument: the persisted ``is_selected`` flags are
        the only source of truth.
        """

        self._transition(tenant_id, ReviewState.FINALIZING)
        total_before = self._store.count(tenant_id)
        selected = self._store.selected_rows(tenant_id)

        entries = [
            LedgerEntry(
                key=row.key,
                date=row.date,
                amount=row.amount,
                payee=row.payee,
                memo=row.memo,
                source=row.source,
                external_id=row.external_id,
            )
            for row in selected
        ]

        if entries:
            try:
                self._writer.add_transactions(self._session, tenant_id=tenant_id, entries=entries)
            except Exception as e:
                self._transition(tenant_id, ReviewState.OPEN)
                tenant_log(_logger, tenant_id).error(
                    "complete_review ledger write failed selected=%d: %s",
                    len(entries),
                    e,
                )
                raise FinalizeWriteFailure(
                    f"ledger write failed for {len(entries)} transaction(s); "
                    "staged rows were kept, retry completing the review"
                ) from e

        self._store.delete_all(tenant_id)
        self._transition(tenant_id, ReviewState.CLOSED)

        accepted = len(entries)
        result = CompleteReviewResult(
            accepted_count=accepted, rejected_count=total_before - accepted
        )
        tenant_log(_logger, tenant_id).info(
            "complete_review accepted=%d rejected=%d",
            result.accepted_count,
            result.rejected_count,
        )
        return result

    def delete_all_review(self, tenant_id: str) -> int:
        """Discard the whole staging area without accepting anything."""

        deleted = self._store.delete_all(tenant_id)
        self._transition(tenant_id, ReviewState.CLOSED)
        tenant_log(_logger, tenant_id).info("delete_all_review deleted=%d", deleted)
        return deleted


__all__ = ["ReviewFinalizer", "ReviewState"]

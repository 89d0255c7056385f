"""Duplicate detection for incoming bank-file rows.

Classification is batched: the distinct external ids of an upload are looked
up with exactly two queries, one against the permanent ledger
(``fa_transactions``) and one against staging
(``fa_import_review_transactions``), regardless of batch size. Each query
reduces multiple rows sharing an external id to the single most recent one
(latest ``date``, then highest ``id``) inside the database, so the resulting
maps are deterministic and never see colliding keys.

Per candidate, the ledger map is consulted first, then staging:

- external id unknown             -> ``NEW``
- known, date/amount/payee equal  -> ``EXACT_DUPLICATE``
- known, any of the three differs -> ``POTENTIAL_DUPLICATE``

Public surface:
- ``latest_per_external_id``: the reduction query, usable with either model.
- ``compare_fields`` / ``detect_duplicate``: pure decision helpers.
- ``DuplicateClassifier``: session-bound orchestration of the above.
"""

from __future__ import annotations

import uuid
from collections.abc import Collection, Mapping, Sequence
from datetime import date
from decimal import Decimal
from typing import Protocol, TypeVar

from db.models.finance import FaImportReviewTransaction, FaTransaction
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .errors import ClassifierInputError
from .logging_setup import get_logger, tenant_log
from .models import Classification, DuplicateStatus, ImportCandidate

_logger = get_logger("import_review.duplicates")


class MatchableRecord(Protocol):
    """Fields an existing row must expose to be compared with a candidate."""

    key: uuid.UUID
    date: date
    amount: Decimal
    payee: str


_ModelT = TypeVar("_ModelT", FaTransaction, FaImportReviewTransaction)


def latest_per_external_id(
    session: Session,
    model: type[_ModelT],
    *,
    tenant_id: str,
    external_ids: Collection[str],
) -> dict[str, _ModelT]:
    """Return ``external_id -> most recent row`` for the tenant.

    Uses ``row_number()`` partitioned by ``external_id`` and ordered by
    ``date DESC, id DESC``; only row 1 of each partition is fetched.
    """

    if not external_ids:
        return {}

    rank = (
        func.row_number()
        .over(partition_by=model.external_id, order_by=(model.date.desc(), model.id.desc()))
        .label("rn")
    )
    ranked = (
        select(model.id, rank)
        .where(model.tenant_id == tenant_id)
        .where(model.external_id.in_(list(external_ids)))
        .subquery()
    )
    stmt = select(model).join(ranked, model.id == ranked.c.id).where(ranked.c.rn == 1)
    rows = session.scalars(stmt).all()
    return {row.external_id: row for row in rows if row.external_id is not None}


def _require_external_id(candidate: ImportCandidate) -> None:
    if not candidate.external_id:
        raise ClassifierInputError(
            "external_id cannot be empty; the parser must supply or synthesize one "
            f"(payee={candidate.payee!r}, date={candidate.date})"
        )


def compare_fields(candidate: ImportCandidate, existing: MatchableRecord) -> DuplicateStatus:
    """Exact when date, amount and payee all match; otherwise potential."""

    same = (
        existing.date == candidate.date
        and existing.amount == candidate.amount
        and existing.payee == candidate.payee
    )
    return DuplicateStatus.EXACT_DUPLICATE if same else DuplicateStatus.POTENTIAL_DUPLICATE


def detect_duplicate(
    candidate: ImportCandidate,
    ledger_by_external_id: Mapping[str, MatchableRecord],
    staged_by_external_id: Mapping[str, MatchableRecord],
) -> Classification:
    """Classify one candidate against the two prebuilt lookup maps."""

    _require_external_id(candidate)
    existing = ledger_by_external_id.get(candidate.external_id)
    if existing is None:
        existing = staged_by_external_id.get(candidate.external_id)
    if existing is None:
        return Classification(DuplicateStatus.NEW, None)
    return Classification(compare_fields(candidate, existing), existing.key)


class DuplicateClassifier:
    """Classify upload batches against a tenant's ledger and staging rows."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def lookup_ledger(
        self, tenant_id: str, external_ids: Collection[str]
    ) -> dict[str, FaTransaction]:
        return latest_per_external_id(
            self._session, FaTransaction, tenant_id=tenant_id, external_ids=external_ids
        )

    def lookup_staging(
        self, tenant_id: str, external_ids: Collection[str]
    ) -> dict[str, FaImportReviewTransaction]:
        return latest_per_external_id(
            self._session,
            FaImportReviewTransaction,
            tenant_id=tenant_id,
            external_ids=external_ids,
        )

    def classify(
        self, tenant_id: str, candidates: Sequence[ImportCandidate]
    ) -> list[Classification]:
        """Return one classification per candidate, in input order.

        All candidates are checked for an external id before any query runs.
        Lookups see data as it was before this batch, so two candidates that
        share an external id are each judged against existing rows only.
        """

        for cand in candidates:
            _require_external_id(cand)

        external_ids = sorted({c.external_id for c in candidates})
        ledger = self.lookup_ledger(tenant_id, external_ids)
        staged = self.lookup_staging(tenant_id, external_ids)
        tenant_log(_logger, tenant_id).debug(
            "duplicate lookup ids=%d ledger_hits=%d staging_hits=%d",
            len(external_ids),
            len(ledger),
            len(staged),
        )
        return [detect_duplicate(c, ledger, staged) for c in candidates]


__all__ = [
    "DuplicateClassifier",
    "MatchableRecord",
    "compare_fields",
    "detect_duplicate",
    "latest_per_external_id",
]

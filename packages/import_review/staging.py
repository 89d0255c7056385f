"""Tenant-scoped access to the import review staging table.

``StagingStore`` is the only code that touches ``fa_import_review_transactions``.
Every statement it issues carries a ``tenant_id`` predicate, and every
mutation is a single set-based ``INSERT``/``UPDATE``/``DELETE``. Rows are never
loaded into memory just to be changed. The caller owns the transaction
(commit/rollback happen in ``db.client.session_scope``).
"""

from __future__ import annotations

import uuid
from collections.abc import Collection, Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Literal

from db.models.finance import FaImportReviewTransaction
from sqlalchemy import ColumnElement, delete, func, insert, select, update
from sqlalchemy.orm import Session

from .models import Classification, ImportCandidate

DEFAULT_PAGE_NUMBER = 1
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 1000

# Stable review order: newest first, then payee, then newest insert. The
# trailing id makes the order total so consecutive pages never overlap.
REVIEW_ORDER = (
    FaImportReviewTransaction.date.desc(),
    FaImportReviewTransaction.payee.asc(),
    FaImportReviewTransaction.id.desc(),
)


def normalize_paging(page_number: int | None, page_size: int | None) -> tuple[int, int]:
    """Clamp paging input: page < 1 -> 1; size < 1 -> 50; size > 1000 -> 1000."""

    number = DEFAULT_PAGE_NUMBER if page_number is None or page_number < 1 else page_number
    size = DEFAULT_PAGE_SIZE if page_size is None or page_size < 1 else page_size
    return number, min(size, MAX_PAGE_SIZE)


@dataclass(frozen=True, slots=True)
class StagedPage:
    rows: list[FaImportReviewTransaction]
    total_count: int
    page_number: int
    page_size: int


class StagingStore:
    """CRUD surface over staged review rows for one session."""

    def __init__(self, session: Session) -> None:
        self._session = session

    # ---- helpers -----------------------------------------------------------

    @staticmethod
    def _tenant(tenant_id: str) -> ColumnElement[bool]:
        return FaImportReviewTransaction.tenant_id == tenant_id

    # ---- writes ------------------------------------------------------------

    def insert_batch(
        self,
        tenant_id: str,
        items: Iterable[tuple[ImportCandidate, Classification]],
    ) -> list[uuid.UUID]:
        """Insert classified candidates in one statement and return their keys.

        ``is_selected`` is written together with the row from the
        classification, so no staged row ever exists without its default
        selection.
        """

        rows: list[dict[str, Any]] = []
        for cand, cls in items:
            rows.append(
                {
                    "key": uuid.uuid4(),
                    "tenant_id": tenant_id,
                    "date": cand.date,
                    "payee": cand.payee,
                    "amount": cand.amount,
                    "source": cand.source,
                    "external_id": cand.external_id,
                    "memo": cand.memo,
                    "duplicate_status": str(cls.status),
                    "duplicate_of_key": cls.duplicate_of_key,
                    "is_selected": cls.is_selected,
                }
            )
        if rows:
            self._session.execute(insert(FaImportReviewTransaction), rows)
        return [r["key"] for r in rows]

    def update_selection(
        self,
        tenant_id: str,
        keys: Collection[uuid.UUID] | Literal["all"],
        selected: bool,
    ) -> int:
        """Set ``is_selected`` for the given keys (or every row) in one UPDATE.

        Keys belonging to another tenant simply do not match. Returns the
        number of rows the statement touched.
        """

        stmt = update(FaImportReviewTransaction).where(self._tenant(tenant_id))
        if keys != "all":
            stmt = stmt.where(FaImportReviewTransaction.key.in_(list(keys)))
        result = self._session.execute(
            stmt.values(is_selected=selected).execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    def delete_all(self, tenant_id: str) -> int:
        """Delete every staged row of the tenant; deleting nothing is fine."""

        result = self._session.execute(
            delete(FaImportReviewTransaction)
            .where(self._tenant(tenant_id))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    # ---- reads -------------------------------------------------------------

    def count(self, tenant_id: str, *criteria: ColumnElement[bool]) -> int:
        """``SELECT count(*)`` over the tenant's rows, optionally filtered."""

        stmt = (
            select(func.count())
            .select_from(FaImportReviewTransaction)
            .where(self._tenant(tenant_id), *criteria)
        )
        return int(self._session.execute(stmt).scalar_one())

    def query_page(
        self,
        tenant_id: str,
        page_number: int | None = None,
        page_size: int | None = None,
    ) -> StagedPage:
        number, size = normalize_paging(page_number, page_size)
        total = self.count(tenant_id)
        stmt = (
            select(FaImportReviewTransaction)
            .where(self._tenant(tenant_id))
            .order_by(*REVIEW_ORDER)
            .offset((number - 1) * size)
            .limit(size)
        )
        rows = list(self._session.scalars(stmt).all())
        return StagedPage(rows=rows, total_count=total, page_number=number, page_size=size)

    def selected_rows(self, tenant_id: str) -> Sequence[FaImportReviewTransaction]:
        """All selected rows of the tenant, unpaginated, in review order."""

        stmt = (
            select(FaImportReviewTransaction)
            .where(self._tenant(tenant_id), FaImportReviewTransaction.is_selected.is_(True))
            .order_by(*REVIEW_ORDER)
        )
        return self._session.scalars(stmt).all()


__all__ = [
    "DEFAULT_PAGE_NUMBER",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "REVIEW_ORDER",
    "StagedPage",
    "StagingStore",
    "normalize_paging",
]

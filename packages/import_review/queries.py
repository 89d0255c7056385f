"""Read side of the review: paginated rows and summary counts."""

from __future__ import annotations

from db.models.finance import FaImportReviewTransaction
from sqlalchemy.orm import Session

from .models import DuplicateStatus, PageMetadata, ReviewItem, ReviewPage, ReviewSummary
from .staging import StagingStore


class ReviewQueryService:
    def __init__(self, session: Session) -> None:
        self._store = StagingStore(session)

    def get_page(
        self,
        tenant_id: str,
        page_number: int | None = None,
        page_size: int | None = None,
    ) -> ReviewPage:
        """One page in review order (date desc, payee asc, newest insert first).

        Paging input is clamped (see ``staging.normalize_paging``). A page
        past the end comes back empty with accurate metadata.
        """

        page = self._store.query_page(tenant_id, page_number, page_size)
        return ReviewPage(
            items=[ReviewItem.model_validate(row) for row in page.rows],
            metadata=PageMetadata.calculate(page.page_number, page.page_size, page.total_count),
        )

    def get_summary(self, tenant_id: str) -> ReviewSummary:
        # Each figure is its own COUNT query; rows are never materialized.
        status = FaImportReviewTransaction.duplicate_status
        return ReviewSummary(
            total_count=self._store.count(tenant_id),
            selected_count=self._store.count(
                tenant_id, FaImportReviewTransaction.is_selected.is_(True)
            ),
            new_count=self._store.count(tenant_id, status == str(DuplicateStatus.NEW)),
            exact_duplicate_count=self._store.count(
                tenant_id, status == str(DuplicateStatus.EXACT_DUPLICATE)
            ),
            potential_duplicate_count=self._store.count(
                tenant_id, status == str(DuplicateStatus.POTENTIAL_DUPLICATE)
            ),
        )


__all__ = ["ReviewQueryService"]

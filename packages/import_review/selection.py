"""Server-side selection state for staged review rows.

Selection lives only in ``fa_import_review_transactions.is_selected``. Clients
render what the server returns and send explicit changes here. They never
hold the authoritative set, because a client that has loaded only some pages
cannot know about the rest. Each call is one set-based UPDATE, so
``select_all`` covers rows the caller has never fetched.
"""

from __future__ import annotations

import uuid
from collections.abc import Collection

from sqlalchemy.orm import Session

from .errors import ReviewValidationError
from .logging_setup import get_logger, tenant_log
from .staging import StagingStore

_logger = get_logger("import_review.selection")


class SelectionManager:
    def __init__(self, session: Session) -> None:
        self._store = StagingStore(session)

    def set_selection(
        self, tenant_id: str, keys: Collection[uuid.UUID], selected: bool
    ) -> int:
        """Set ``is_selected`` on the given rows; returns rows updated.

        An empty ``keys`` is rejected as a client bug. Keys that do not exist
        for this tenant are ignored without telling the caller they exist elsewhere.
        """

        unique = set(keys)
        if not unique:
            tenant_log(_logger, tenant_id).warning("set_selection rejected: empty key set")
            raise ReviewValidationError("keys", "At least one transaction key must be provided.")

        updated = self._store.update_selection(tenant_id, unique, selected)
        tenant_log(_logger, tenant_id).info(
            "set_selection requested=%d updated=%d selected=%s",
            len(unique),
            updated,
            selected,
        )
        return updated

    def select_all(self, tenant_id: str) -> int:
        updated = self._store.update_selection(tenant_id, "all", True)
        tenant_log(_logger, tenant_id).info("select_all updated=%d", updated)
        return updated

    def deselect_all(self, tenant_id: str) -> int:
        updated = self._store.update_selection(tenant_id, "all", False)
        tenant_log(_logger, tenant_id).info("deselect_all updated=%d", updated)
        return updated


__all__ = ["SelectionManager"]

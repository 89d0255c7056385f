"""Permanent-ledger writer used when a review is completed.

The review engine only depends on the :class:`LedgerWriter` protocol; any
object with a compatible ``add_transactions`` method can be supplied (a remote
ledger service, a test double). :class:`SqlLedgerWriter` is the default and
writes into ``fa_transactions`` in the same session (and therefore the same
database transaction) as the staging purge.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from db.models.finance import FaSplit, FaTransaction
from sqlalchemy.orm import Session

from .logging_setup import get_logger, tenant_log
from .models import LedgerEntry

_logger = get_logger("import_review.ledger")


class LedgerWriter(Protocol):
    def add_transactions(
        self, session: Session, *, tenant_id: str, entries: Sequence[LedgerEntry]
    ) -> None: ...


class SqlLedgerWriter:
    """Insert ledger rows, each with one default split for its full amount.

    ``FaTransaction.key`` is set to ``entry.key`` so the accepted row keeps the
    identity it had in staging.
    """

    def __init__(self, *, default_category: str = "") -> None:
        self.default_category = default_category

    def add_transactions(
        self, session: Session, *, tenant_id: str, entries: Sequence[LedgerEntry]
    ) -> None:
        if not entries:
            return

        for entry in entries:
            session.add(
                FaTransaction(
                    key=entry.key,
                    tenant_id=tenant_id,
                    date=entry.date,
                    payee=entry.payee,
                    amount=entry.amount,
                    source=entry.source,
                    external_id=entry.external_id,
                    memo=entry.memo,
                    splits=[
                        FaSplit(amount=entry.amount, category=self.default_category, order=0)
                    ],
                )
            )
        # Flush so constraint violations surface here, before staging is purged.
        session.flush()
        tenant_log(_logger, tenant_id).info("ledger write rows=%d", len(entries))


__all__ = ["LedgerWriter", "SqlLedgerWriter"]

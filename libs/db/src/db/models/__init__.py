"""Shared SQLAlchemy models registry for the workspace database.

Currently includes the ledger and import-review models used by
``import_review``.
"""

from .finance import Base, FaImportReviewTransaction, FaSplit, FaTransaction

__all__ = [
    "Base",
    "FaImportReviewTransaction",
    "FaSplit",
    "FaTransaction",
]

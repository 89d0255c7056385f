from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
    func,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# BIGINT primary keys do not autoincrement on SQLite; the variant keeps the
# rowid alias there while Postgres gets a real BIGINT identity.
_PK = BigInteger().with_variant(Integer, "sqlite")


class Base(DeclarativeBase):
    pass


# ---------------------------
# Core: fa_transactions (permanent ledger)
# ---------------------------


class FaTransaction(Base):
    __tablename__ = "fa_transactions"

    id: Mapped[int] = mapped_column(_PK, primary_key=True, autoincrement=True)
    # Public identifier. Rows accepted from import review reuse the staged
    # row's key so later imports can point ``duplicate_of_key`` at them.
    key: Mapped[uuid.UUID] = mapped_column(
        Uuid, nullable=False, unique=True, default=uuid.uuid4
    )
    tenant_id: Mapped[str] = mapped_column(String, nullable=False)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    payee: Mapped[str] = mapped_column(String(200), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    source: Mapped[str | None] = mapped_column(String(200), nullable=True)
    external_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    memo: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    splits: Mapped[list[FaSplit]] = relationship(
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="FaSplit.order",
    )

    __table_args__ = (
        Index("ix_fa_transactions_tenant_external_id", "tenant_id", "external_id"),
        Index("ix_fa_transactions_tenant_date", "tenant_id", "date"),
    )


class FaSplit(Base):
    __tablename__ = "fa_splits"

    id: Mapped[int] = mapped_column(_PK, primary_key=True, autoincrement=True)
    transaction_id: Mapped[int] = mapped_column(
        ForeignKey("fa_transactions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    category: Mapped[str] = mapped_column(
        String(200), nullable=False, server_default=text("''")
    )
    memo: Mapped[str | None] = mapped_column(String(500), nullable=True)
    order: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))

    transaction: Mapped[FaTransaction] = relationship(back_populates="splits")


# ---------------------------
# Staging: fa_import_review_transactions
# ---------------------------


DUPLICATE_STATUSES: tuple[str, ...] = ("new", "exact_duplicate", "potential_duplicate")


class FaImportReviewTransaction(Base):
    """A parsed bank-file row parked for review before it reaches the ledger.

    Nothing here references ``fa_splits``; splits only exist once a row is
    accepted and written by the ledger writer.
    """

    __tablename__ = "fa_import_review_transactions"

    # Insertion order; used as the final tie-breaker in both pagination and
    # duplicate lookups.
    id: Mapped[int] = mapped_column(_PK, primary_key=True, autoincrement=True)
    key: Mapped[uuid.UUID] = mapped_column(
        Uuid, nullable=False, unique=True, default=uuid.uuid4
    )
    tenant_id: Mapped[str] = mapped_column(String, nullable=False)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    payee: Mapped[str] = mapped_column(String(200), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    source: Mapped[str | None] = mapped_column(String(200), nullable=True)
    external_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    memo: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Written once at insert time, never updated.
    duplicate_status: Mapped[str] = mapped_column(
        String, nullable=False, server_default=text("'new'")
    )
    # Informational pointer at a ledger or staged row; not a foreign key.
    duplicate_of_key: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    is_selected: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )
    imported_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint(
            "duplicate_status in (" + ",".join(f"'{s}'" for s in DUPLICATE_STATUSES) + ")",
            name="ck_fa_irt_duplicate_status",
        ),
        Index("ix_fa_irt_tenant_external_id", "tenant_id", "external_id"),
        Index("ix_fa_irt_tenant_selected", "tenant_id", "is_selected"),
        Index("ix_fa_irt_tenant_date", "tenant_id", "date"),
    )


__all__ = [
    "Base",
    "DUPLICATE_STATUSES",
    "FaImportReviewTransaction",
    "FaSplit",
    "FaTransaction",
]

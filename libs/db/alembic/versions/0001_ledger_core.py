# ruff: noqa: I001
"""Ledger core tables: transactions and their splits.

Revision ID: 0001_ledger_core
Revises: None
Create Date: 2025-12-07
"""

from __future__ import annotations  # ruff: noqa: I001

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_ledger_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "fa_transactions",
        sa.Column("id", sa.BigInteger().with_variant(sa.Integer(), "sqlite"), primary_key=True),
        sa.Column("key", sa.Uuid(), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("payee", sa.String(200), nullable=False),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("source", sa.String(200), nullable=True),
        sa.Column("external_id", sa.String(100), nullable=True),
        sa.Column("memo", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint("key", name="uq_fa_transactions_key"),
    )
    op.create_index(
        "ix_fa_transactions_tenant_external_id",
        "fa_transactions",
        ["tenant_id", "external_id"],
        unique=False,
    )
    op.create_index(
        "ix_fa_transactions_tenant_date", "fa_transactions", ["tenant_id", "date"], unique=False
    )

    # One or more allocations per transaction; the ledger writer creates a
    # single default split for imported rows.
    op.create_table(
        "fa_splits",
        sa.Column("id", sa.BigInteger().with_variant(sa.Integer(), "sqlite"), primary_key=True),
        sa.Column("transaction_id", sa.BigInteger(), nullable=False),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("category", sa.String(200), nullable=False, server_default=sa.text("''")),
        sa.Column("memo", sa.String(500), nullable=True),
        sa.Column("order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.ForeignKeyConstraint(
            ["transaction_id"],
            ["fa_transactions.id"],
            name="fk_fa_splits_transaction",
            ondelete="CASCADE",
        ),
    )
    op.create_index("ix_fa_splits_transaction_id", "fa_splits", ["transaction_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_fa_splits_transaction_id", table_name="fa_splits")
    op.drop_table("fa_splits")
    op.drop_index("ix_fa_transactions_tenant_date", table_name="fa_transactions")
    op.drop_index("ix_fa_transactions_tenant_external_id", table_name="fa_transactions")
    op.drop_table("fa_transactions")

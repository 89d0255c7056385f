# ruff: noqa: I001
"""Staging table for bank-file rows awaiting review.

Revision ID: 0002_import_review
Revises: 0001_ledger_core
Create Date: 2025-12-30
"""

from __future__ import annotations  # ruff: noqa: I001

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0002_import_review"
down_revision: str | None = "0001_ledger_core"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "fa_import_review_transactions",
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
            "duplicate_status", sa.String(), nullable=False, server_default=sa.text("'new'")
        ),
        sa.Column("duplicate_of_key", sa.Uuid(), nullable=True),
        sa.Column(
            "imported_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint("key", name="uq_fa_irt_key"),
        sa.CheckConstraint(
            "duplicate_status in ('new','exact_duplicate','potential_duplicate')",
            name="ck_fa_irt_duplicate_status",
        ),
    )
    op.create_index(
        "ix_fa_irt_tenant_external_id",
        "fa_import_review_transactions",
        ["tenant_id", "external_id"],
        unique=False,
    )
    op.create_index(
        "ix_fa_irt_tenant_date",
        "fa_import_review_transactions",
        ["tenant_id", "date"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_fa_irt_tenant_date", table_name="fa_import_review_transactions")
    op.drop_index("ix_fa_irt_tenant_external_id", table_name="fa_import_review_transactions")
    op.drop_table("fa_import_review_transactions")

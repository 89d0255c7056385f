# ruff: noqa: I001
"""Persist review selection server-side.

Selection previously lived only in the browser, which lost choices for rows on
pages the client never loaded. Existing staged rows start unselected.

Revision ID: 0003_import_review_is_selected
Revises: 0002_import_review
Create Date: 2025-12-31
"""

from __future__ import annotations  # ruff: noqa: I001

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0003_import_review_is_selected"
down_revision: str | None = "0002_import_review"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.add_column(
        "fa_import_review_transactions",
        sa.Column("is_selected", sa.Boolean(), nullable=False, server_default=sa.text("false")),
    )
    # Backs the selected-count summary and the finalize read
    op.create_index(
        "ix_fa_irt_tenant_selected",
        "fa_import_review_transactions",
        ["tenant_id", "is_selected"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_fa_irt_tenant_selected", table_name="fa_import_review_transactions")
    with op.batch_alter_table("fa_import_review_transactions") as batch:
        batch.drop_column("is_selected")

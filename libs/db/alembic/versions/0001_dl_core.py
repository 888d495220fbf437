# ruff: noqa: I001
"""Donation ledger and named settings tables.

Revision ID: 0001_dl_core
Revises: None
Create Date: 2025-10-04
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_dl_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "dl_donations",
        sa.Column(
            "id",
            sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
            primary_key=True,
            autoincrement=True,
        ),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("acknowledged", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("donation_date", sa.Date(), nullable=False),
        sa.Column("last_name", sa.Text(), nullable=False, server_default=""),
        sa.Column("first_name", sa.Text(), nullable=False, server_default=""),
        sa.Column("salutation", sa.Text(), nullable=False, server_default=""),
        sa.Column("gross", sa.Numeric(12, 2), nullable=False),
        sa.Column("fee", sa.Numeric(12, 2), nullable=False),
        sa.Column("net", sa.Numeric(12, 2), nullable=False),
        sa.Column("payment_type", sa.String(length=2), nullable=False),
        sa.Column("payment_source", sa.Text(), nullable=False, server_default=""),
        sa.Column("payment_note", sa.Text(), nullable=False, server_default=""),
        sa.Column("email_address", sa.Text(), nullable=False, server_default=""),
        sa.Column("street_address", sa.Text(), nullable=False, server_default=""),
        sa.Column("city", sa.Text(), nullable=False, server_default=""),
        sa.Column("state", sa.Text(), nullable=False, server_default=""),
        sa.Column("zip_code", sa.Text(), nullable=False, server_default=""),
        sa.Column("source_file", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint(
            "payment_type in ('P1','P2','P3','P4','C1','D1','I1')",
            name="ck_dl_donation_payment_type",
        ),
    )
    op.create_index("ix_dl_donations_position", "dl_donations", ["position"])
    op.create_index(
        "ix_dl_donations_unacknowledged", "dl_donations", ["acknowledged", "position"]
    )
    op.create_index(
        "ix_dl_donations_type_date", "dl_donations", ["payment_type", "donation_date"]
    )

    op.create_table(
        "dl_settings",
        sa.Column("name", sa.String(), primary_key=True),
        sa.Column("value", sa.Text(), nullable=False, server_default=""),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )


def downgrade() -> None:
    op.drop_table("dl_settings")
    op.drop_index("ix_dl_donations_type_date", table_name="dl_donations")
    op.drop_index("ix_dl_donations_unacknowledged", table_name="dl_donations")
    op.drop_index("ix_dl_donations_position", table_name="dl_donations")
    op.drop_table("dl_donations")

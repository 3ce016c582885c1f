"""Company table

Revision ID: 0001_company_table
Revises:
Create Date: 2026-10-19

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

from placement_portal.db.models import COMPANY_COLUMNS, PRIMARY_KEY

# revision identifiers, used by Alembic.
revision = "0001_company_table"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "company",
        sa.Column(PRIMARY_KEY, sa.Text(), primary_key=True),
        *(sa.Column(name, sa.Text(), nullable=True) for name in COMPANY_COLUMNS),
    )
    op.create_index("ix_company_category", "company", ["category"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_company_category", table_name="company")
    op.drop_table("company")

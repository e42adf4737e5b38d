"""Collapse duplicate payment records and enforce unique transaction_id

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 09:12:40.118302

"""
from alembic import op

from app.services.maintenance import repair_payment_records, TRANSACTION_INDEX


# revision identifiers, used by Alembic.
revision = '20261019_0002'
down_revision = '20261019_0001'
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Same pass the API runs on startup; keep-first by id, then the unique index
    repair_payment_records(op.get_bind())


def downgrade() -> None:
    op.execute(f"DROP INDEX IF EXISTS {TRANSACTION_INDEX}")

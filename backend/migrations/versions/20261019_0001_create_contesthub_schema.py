from __future__ import annotations
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=True),
        sa.Column("photo", sa.Text(), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("role", sa.String(length=16), nullable=False, server_default="user"),
        sa.Column("win_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "contests",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("creator_email", sa.String(length=320), nullable=False),
        sa.Column("name", sa.String(length=160), nullable=False),
        sa.Column("image", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("task_instruction", sa.Text(), nullable=True),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("prize_money", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("deadline", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="pending"),
        sa.Column("participants_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("winner_email", sa.String(length=320), nullable=True),
        sa.Column("winner_name", sa.String(length=120), nullable=True),
        sa.Column("winner_photo", sa.Text(), nullable=True),
        sa.Column("win_date", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("participants_count >= 0", name="ck_contests_participants_nonneg"),
    )
    op.create_index("ix_contests_creator_email", "contests", ["creator_email"])
    op.create_index("ix_contests_type", "contests", ["type"])
    op.create_index("ix_contests_status", "contests", ["status"])
    op.create_index("ix_contests_winner_email", "contests", ["winner_email"])

    op.create_table(
        "participations",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("contest_id", sa.Uuid(), nullable=False),
        sa.Column("user_email", sa.String(length=320), nullable=False),
        sa.Column("transaction_id", sa.String(length=255), nullable=True),
        sa.Column("registered_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.UniqueConstraint("contest_id", "user_email", name="uq_participation_contest_user"),
    )
    op.create_index("ix_participations_contest_id", "participations", ["contest_id"])
    op.create_index("ix_participations_user_email", "participations", ["user_email"])

    op.create_table(
        "submissions",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("contest_id", sa.Uuid(), nullable=False),
        sa.Column("user_email", sa.String(length=320), nullable=False),
        sa.Column("task_link", sa.Text(), nullable=False),
        sa.Column("submitted_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="pending"),
        sa.UniqueConstraint("contest_id", "user_email", name="uq_submission_contest_user"),
    )
    op.create_index("ix_submissions_contest_id", "submissions", ["contest_id"])
    op.create_index("ix_submissions_user_email", "submissions", ["user_email"])

    # transaction_id uniqueness comes in 0002, after legacy duplicates are collapsed
    op.create_table(
        "payment_records",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("contest_id", sa.Uuid(), nullable=False),
        sa.Column("contest_name", sa.String(length=160), nullable=True),
        sa.Column("user_email", sa.String(length=320), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("currency", sa.String(length=8), nullable=False, server_default="usd"),
        sa.Column("tracking_id", sa.String(length=16), nullable=False),
        sa.Column("transaction_id", sa.String(length=255), nullable=False),
        sa.Column("registered_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_payment_records_contest_id", "payment_records", ["contest_id"])
    op.create_index("ix_payment_records_user_email", "payment_records", ["user_email"])

def downgrade() -> None:
    op.drop_table("payment_records")
    op.drop_table("submissions")
    op.drop_table("participations")
    op.drop_table("contests")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

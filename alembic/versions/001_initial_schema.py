"""Initial schema: users, swipes, matches, messages.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── 1. users ────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("username", sa.String(80), nullable=False),
        sa.Column("bio", sa.Text, nullable=True),
        sa.Column("gender", sa.String(32), nullable=True),
        sa.Column("birthdate", sa.Date, nullable=True),
        sa.Column("location", sa.String(120), nullable=True),
        sa.Column(
            "photo",
            sa.String(512),
            nullable=True,
            comment="Opaque blob-store reference",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    # ── 2. swipes (append-only ledger) ──────────────────────────────
    op.create_table(
        "swipes",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "swiper_id",
            sa.Integer,
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "target_id",
            sa.Integer,
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("direction", sa.String(8), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.CheckConstraint(
            "direction IN ('left', 'right')", name="ck_swipe_direction"
        ),
        sa.CheckConstraint("swiper_id <> target_id", name="ck_swipe_not_self"),
    )
    op.create_index(
        "ix_swipes_swiper_target_direction",
        "swipes",
        ["swiper_id", "target_id", "direction"],
    )

    # ── 3. matches (one row per unordered pair) ─────────────────────
    op.create_table(
        "matches",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "low_id",
            sa.Integer,
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "high_id",
            sa.Integer,
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "matched_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.UniqueConstraint("low_id", "high_id", name="uq_match_pair"),
        sa.CheckConstraint("low_id < high_id", name="ck_match_pair_order"),
    )
    op.create_index("ix_matches_low_id", "matches", ["low_id"])
    op.create_index("ix_matches_high_id", "matches", ["high_id"])

    # ── 4. messages ─────────────────────────────────────────────────
    op.create_table(
        "messages",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "match_id",
            sa.Integer,
            sa.ForeignKey("matches.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "sender_id",
            sa.Integer,
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column(
            "sent_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index(
        "ix_messages_match_sent",
        "messages",
        ["match_id", "sent_at", "id"],
    )


def downgrade() -> None:
    op.drop_index("ix_messages_match_sent", table_name="messages")
    op.drop_table("messages")

    op.drop_index("ix_matches_high_id", table_name="matches")
    op.drop_index("ix_matches_low_id", table_name="matches")
    op.drop_table("matches")

    op.drop_index("ix_swipes_swiper_target_direction", table_name="swipes")
    op.drop_table("swipes")

    op.drop_index("ix_users_username", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

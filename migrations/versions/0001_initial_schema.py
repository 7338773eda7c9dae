"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


_ENUMS = {
    "bet_category_enum": ("health", "learning", "creative", "social", "financial", "other"),
    "bet_status_enum": ("active", "won", "lost"),
    "buddy_relationship_enum": ("friend", "family", "coworker", "coach"),
    "avatar_category_enum": ("starter", "motivator", "legend", "premium"),
    "collectible_tier_enum": ("accessory", "vehicle", "property"),
    "wall_event_type_enum": ("signup", "bet_created", "bet_won", "bet_lost", "milestone"),
    "ledger_reason_enum": (
        "signup_grant", "login_bonus", "bet_stake", "bet_payout",
        "support_stake", "support_payout", "avatar_purchase", "collectible_purchase",
    ),
}


def _enum(name: str) -> sa.Enum:
    return sa.Enum(*_ENUMS[name], name=name, create_type=False)


def upgrade() -> None:
    # --- ENUM types ---
    for name, values in _ENUMS.items():
        sa.Enum(*values, name=name).create(op.get_bind(), checkfirst=True)

    # --- avatars ---
    op.create_table(
        "avatars",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("emoji", sa.String(16), nullable=False),
        sa.Column("name", sa.String(64), nullable=False),
        sa.Column("category", _enum("avatar_category_enum"), nullable=False),
        sa.Column("price", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("personality_voice", sa.String(256), nullable=True),
        sa.Column("is_premium", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("encouragement_messages", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_avatars_id", "avatars", ["id"])

    # --- collectibles ---
    op.create_table(
        "collectibles",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("emoji", sa.String(16), nullable=False),
        sa.Column("name", sa.String(64), nullable=False),
        sa.Column("tier", _enum("collectible_tier_enum"), nullable=False),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_collectibles_id", "collectibles", ["id"])

    # --- profiles ---
    op.create_table(
        "profiles",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("display_name", sa.String(64), nullable=True),
        sa.Column("avatar_url", sa.String(512), nullable=True),
        sa.Column("balance", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("active_avatar_id", sa.Integer(), sa.ForeignKey("avatars.id"), nullable=True),
        sa.Column("timezone", sa.String(64), nullable=False, server_default="UTC"),
        sa.Column("last_login_bonus_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("balance >= 0", name="ck_profiles_balance_non_negative"),
    )

    # --- bets ---
    op.create_table(
        "bets",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("habit_description", sa.String(200), nullable=False),
        sa.Column("category", _enum("bet_category_enum"), nullable=True),
        sa.Column("stake_amount", sa.Integer(), nullable=False),
        sa.Column("duration_weeks", sa.Integer(), nullable=False),
        sa.Column("current_week", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("status", _enum("bet_status_enum"), nullable=False, server_default="active"),
        sa.Column("buddy_email", sa.String(320), nullable=True),
        sa.Column("buddy_relationship", _enum("buddy_relationship_enum"), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("stake_amount > 0", name="ck_bets_stake_positive"),
        sa.CheckConstraint("current_week >= 1", name="ck_bets_current_week_min"),
        sa.CheckConstraint("current_week <= duration_weeks", name="ck_bets_current_week_max"),
    )
    op.create_index("ix_bets_user_id", "bets", ["user_id"])
    op.create_index("ix_bets_status", "bets", ["status"])

    # --- checkins ---
    op.create_table(
        "checkins",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("bet_id", sa.String(36), sa.ForeignKey("bets.id", ondelete="CASCADE"), nullable=False),
        sa.Column("week_number", sa.Integer(), nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("checked_in_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("buddy_notified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("bet_id", "week_number", name="uq_checkins_bet_week"),
    )
    op.create_index("ix_checkins_bet_id", "checkins", ["bet_id"])

    # --- supports ---
    op.create_table(
        "supports",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("bet_id", sa.String(36), sa.ForeignKey("bets.id", ondelete="CASCADE"), nullable=False),
        sa.Column("supporter_id", sa.String(64), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("stake_amount", sa.Integer(), nullable=False),
        sa.Column("payout_amount", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("bet_id", "supporter_id", name="uq_supports_bet_supporter"),
    )
    op.create_index("ix_supports_bet_id", "supports", ["bet_id"])
    op.create_index("ix_supports_supporter_id", "supports", ["supporter_id"])

    # --- ownership join tables ---
    op.create_table(
        "user_avatars",
        sa.Column("user_id", sa.String(64), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("avatar_id", sa.Integer(), sa.ForeignKey("avatars.id", ondelete="CASCADE"), nullable=False),
        sa.Column("acquired_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("user_id", "avatar_id"),
    )
    op.create_table(
        "user_collectibles",
        sa.Column("user_id", sa.String(64), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("collectible_id", sa.Integer(), sa.ForeignKey("collectibles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("acquired_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("user_id", "collectible_id"),
    )

    # --- wall_events ---
    op.create_table(
        "wall_events",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("event_type", _enum("wall_event_type_enum"), nullable=False),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True),
        sa.Column("bet_id", sa.String(36), sa.ForeignKey("bets.id", ondelete="SET NULL"), nullable=True),
        sa.Column("metadata", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_wall_events_event_type", "wall_events", ["event_type"])
    op.create_index("ix_wall_events_user_id", "wall_events", ["user_id"])
    op.create_index("ix_wall_events_bet_id", "wall_events", ["bet_id"])
    op.create_index("ix_wall_events_created_at", "wall_events", ["created_at"])

    # --- ledger_entries ---
    op.create_table(
        "ledger_entries",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("balance_after", sa.Integer(), nullable=False),
        sa.Column("reason", _enum("ledger_reason_enum"), nullable=False),
        sa.Column("bet_id", sa.String(36), nullable=True),
        sa.Column("reference", sa.String(64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_ledger_entries_id", "ledger_entries", ["id"])
    op.create_index("ix_ledger_entries_user_id", "ledger_entries", ["user_id"])
    op.create_index("ix_ledger_entries_bet_id", "ledger_entries", ["bet_id"])


def downgrade() -> None:
    op.drop_table("ledger_entries")
    op.drop_table("wall_events")
    op.drop_table("user_collectibles")
    op.drop_table("user_avatars")
    op.drop_table("supports")
    op.drop_table("checkins")
    op.drop_table("bets")
    op.drop_table("profiles")
    op.drop_table("collectibles")
    op.drop_table("avatars")
    for name in reversed(list(_ENUMS)):
        op.execute(f"DROP TYPE IF EXISTS {name}")

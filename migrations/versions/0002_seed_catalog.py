"""seed avatar and collectible catalogs

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-19

Starter avatars are free so every new profile can pick one.
"""
from alembic import op
import sqlalchemy as sa

revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None


_AVATARS = [
    # (emoji, name, category, price, personality_voice, is_premium, encouragement_messages)
    ("🐣", "Chick", "starter", 0, "Cheerful beginner", False,
     ["Every week counts!", "Small steps, big wins."]),
    ("🐶", "Pup", "starter", 0, "Loyal buddy", False,
     ["I believe in you!", "Let's do this together."]),
    ("🦊", "Fox", "motivator", 150, "Clever coach", False,
     ["Outsmart the excuses.", "Consistency beats intensity."]),
    ("🦁", "Lion", "motivator", 300, "Fierce motivator", False,
     ["Roar through this week!", "Champions show up."]),
    ("🐉", "Dragon", "legend", 1000, "Ancient mentor", False,
     ["Legends are built week by week."]),
    ("🦄", "Unicorn", "premium", 2500, "Magical cheerleader", True,
     ["You're one of a kind!", "Magic is just practice."]),
]

_COLLECTIBLES = [
    # (emoji, name, tier, price)
    ("🕶️", "Sunglasses", "accessory", 100),
    ("⌚", "Gold Watch", "accessory", 250),
    ("🚲", "Bicycle", "vehicle", 500),
    ("🏎️", "Race Car", "vehicle", 2000),
    ("🏠", "Cottage", "property", 5000),
    ("🏰", "Castle", "property", 20000),
]


def upgrade() -> None:
    avatars = sa.table(
        "avatars",
        sa.column("emoji", sa.String),
        sa.column("name", sa.String),
        sa.column("category", sa.String),
        sa.column("price", sa.Integer),
        sa.column("personality_voice", sa.String),
        sa.column("is_premium", sa.Boolean),
        sa.column("encouragement_messages", sa.JSON),
    )
    collectibles = sa.table(
        "collectibles",
        sa.column("emoji", sa.String),
        sa.column("name", sa.String),
        sa.column("tier", sa.String),
        sa.column("price", sa.Integer),
    )
    op.bulk_insert(avatars, [
        {
            "emoji": emoji, "name": name, "category": category, "price": price,
            "personality_voice": voice, "is_premium": premium,
            "encouragement_messages": messages,
        }
        for emoji, name, category, price, voice, premium, messages in _AVATARS
    ])
    op.bulk_insert(collectibles, [
        {"emoji": emoji, "name": name, "tier": tier, "price": price}
        for emoji, name, tier, price in _COLLECTIBLES
    ])


def downgrade() -> None:
    op.execute(
        sa.text("DELETE FROM collectibles WHERE name IN :names").bindparams(
            sa.bindparam("names", [c[1] for c in _COLLECTIBLES], expanding=True)
        )
    )
    op.execute(
        sa.text("DELETE FROM avatars WHERE name IN :names").bindparams(
            sa.bindparam("names", [a[1] for a in _AVATARS], expanding=True)
        )
    )

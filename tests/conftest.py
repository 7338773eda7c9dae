"""
Shared pytest fixtures.

Uses a file-backed SQLite database so no Postgres is required for tests.
Every test creates its own users (uuid ids), so tests never share balances.
"""
import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.security import create_access_token
from app.db.base import Base, get_db
from app.main import app
from app.models.avatar import Avatar, AvatarCategory
from app.models.collectible import Collectible, CollectibleTier
from app.services import profiles

SQLITE_URL = "sqlite:///./test_betonyou.db"

engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

_AVATARS = [
    # (emoji, name, category, price, is_premium)
    ("🐣", "Chick",   AvatarCategory.starter,   0,    False),
    ("🦊", "Fox",     AvatarCategory.motivator, 150,  False),
    ("🦄", "Unicorn", AvatarCategory.premium,   2500, True),
]

_COLLECTIBLES = [
    ("🕶️", "Sunglasses", CollectibleTier.accessory, 100),
    ("🚲", "Bicycle",    CollectibleTier.vehicle,   500),
    ("🏰", "Castle",     CollectibleTier.property,  20000),
]


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def create_tables():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    # Seed the catalogs (normally done by Alembic migration)
    db = TestingSessionLocal()
    try:
        for emoji, name, category, price, premium in _AVATARS:
            db.add(Avatar(
                emoji=emoji,
                name=name,
                category=category,
                price=price,
                is_premium=premium,
                personality_voice=f"{name} voice",
                encouragement_messages=["Keep going!"],
            ))
        for emoji, name, tier, price in _COLLECTIBLES:
            db.add(Collectible(emoji=emoji, name=name, tier=tier, price=price))
        db.commit()
    finally:
        db.close()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(db):
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def auth():
    """Factory: bearer headers for a user id."""
    def _headers(user_id: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}
    return _headers


@pytest.fixture()
def make_user(db):
    """Factory: create a profile (with the sign-up grant) and return its id."""
    def _make(display_name: str = "Tester", timezone_name: str = "UTC") -> str:
        user_id = f"user-{uuid.uuid4()}"
        profiles.create_profile(db, user_id, display_name=display_name, timezone_name=timezone_name)
        return user_id
    return _make


@pytest.fixture()
def catalog(db):
    """Name -> id lookups for the seeded avatars and collectibles."""
    return {
        "avatars": {a.name: a.id for a in db.query(Avatar).all()},
        "collectibles": {c.name: c.id for c in db.query(Collectible).all()},
    }

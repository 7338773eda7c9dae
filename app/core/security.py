"""
Request authentication.

User requests carry the access token issued by the external auth provider:
an HS256 JWT signed with SECRET_KEY whose `sub` claim is the user id.
Scheduler requests to /cron/* carry `Bearer <CRON_SECRET>` (checked in
production only).
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt
from fastapi import Depends, Header, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import AuthenticationError, ProfileNotFoundError
from app.db.base import get_db
from app.models.profile import Profile

_bearer = HTTPBearer(auto_error=False)


def create_access_token(user_id: str, expires_minutes: int = 60) -> str:
    """Mint a token the same shape the auth provider issues (used by tests and local tooling)."""
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": user_id,
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes),
        "role": "authenticated",
    }
    if settings.JWT_AUDIENCE:
        payload["aud"] = settings.JWT_AUDIENCE
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str) -> dict[str, Any]:
    """
    Decode and verify a user access token.

    Raises:
        jwt.InvalidTokenError: if the signature, expiry or audience is wrong,
        or the token has no subject.
    """
    options = {"require": ["sub", "exp"]}
    if settings.JWT_AUDIENCE:
        return jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            options=options,
        )
    return jwt.decode(
        token,
        settings.SECRET_KEY,
        algorithms=[settings.JWT_ALGORITHM],
        options={**options, "verify_aud": False},
    )


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(_bearer),
) -> str:
    if credentials is None:
        raise AuthenticationError("Missing bearer token")
    try:
        payload = verify_token(credentials.credentials)
    except jwt.InvalidTokenError as exc:
        raise AuthenticationError(f"Invalid token: {exc}") from exc
    return str(payload["sub"])


def get_current_profile(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> Profile:
    profile = db.get(Profile, user_id)
    if profile is None:
        raise ProfileNotFoundError(user_id)
    return profile


def require_cron_secret(authorization: Optional[str] = Header(default=None)) -> None:
    """Outside production every caller is accepted, as with the hosted scheduler in dev."""
    if not settings.is_production:
        return
    if not settings.CRON_SECRET or authorization != f"Bearer {settings.CRON_SECRET}":
        raise AuthenticationError("Unauthorized")

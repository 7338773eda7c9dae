"""
Custom exception hierarchy for the Bet On Yourself API.

Rule: every HTTP error has a machine-readable `code` string so clients
can branch on it without parsing English messages. The envelope also
carries `error` (same text as `message`) for clients that only read that key.
"""
from __future__ import annotations

from typing import Any

import structlog
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class BetOnYouException(Exception):
    """Base class for all application-level errors."""
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "error": self.message,
        }
        if self.details:
            payload["details"] = self.details
        return payload


class AuthenticationError(BetOnYouException):
    http_status = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message=message)


class InvalidRequestError(BetOnYouException):
    http_status = status.HTTP_400_BAD_REQUEST
    code = "INVALID_REQUEST"


# --- profiles ---------------------------------------------------------------

class ProfileNotFoundError(BetOnYouException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "PROFILE_NOT_FOUND"

    def __init__(self, user_id: str):
        super().__init__(
            message="Profile not found. Create it with POST /profiles/me first.",
            details={"user_id": user_id},
        )


class ProfileAlreadyExistsError(BetOnYouException):
    http_status = status.HTTP_409_CONFLICT
    code = "PROFILE_ALREADY_EXISTS"

    def __init__(self, user_id: str):
        super().__init__(
            message="A profile already exists for this user.",
            details={"user_id": user_id},
        )


class InsufficientBalanceError(BetOnYouException):
    http_status = status.HTTP_409_CONFLICT
    code = "INSUFFICIENT_BALANCE"

    def __init__(self, required: int, balance: int):
        super().__init__(
            message=f"Insufficient balance: {required} GC required, {balance} GC available.",
            details={"required": required, "balance": balance},
        )


# --- bets -------------------------------------------------------------------

class BetNotFoundError(BetOnYouException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "BET_NOT_FOUND"

    def __init__(self, bet_id: str):
        super().__init__(message="Bet not found", details={"bet_id": bet_id})


class NotBetOwnerError(BetOnYouException):
    http_status = status.HTTP_403_FORBIDDEN
    code = "NOT_BET_OWNER"

    def __init__(self, bet_id: str):
        super().__init__(
            message="Only the owner of this bet can do that.",
            details={"bet_id": bet_id},
        )


class BetNotActiveError(BetOnYouException):
    http_status = status.HTTP_409_CONFLICT
    code = "BET_NOT_ACTIVE"

    def __init__(self, bet_id: str, bet_status: str):
        super().__init__(
            message="This bet is no longer active",
            details={"bet_id": bet_id, "status": bet_status},
        )


class InvalidStakeError(BetOnYouException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "INVALID_STAKE"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message=message, details=details)


class DeadlinePassedError(BetOnYouException):
    http_status = status.HTTP_409_CONFLICT
    code = "DEADLINE_PASSED"

    def __init__(self, bet_id: str, week: int, deadline: str):
        super().__init__(
            message=f"The deadline for week {week} has passed.",
            details={"bet_id": bet_id, "week": week, "deadline": deadline},
        )


class CheckinAlreadyCompletedError(BetOnYouException):
    http_status = status.HTTP_409_CONFLICT
    code = "CHECKIN_ALREADY_COMPLETED"

    def __init__(self, bet_id: str, week: int):
        super().__init__(
            message=f"Week {week} is already checked in.",
            details={"bet_id": bet_id, "week": week},
        )


# --- supports ---------------------------------------------------------------

class CannotSupportOwnBetError(BetOnYouException):
    http_status = status.HTTP_403_FORBIDDEN
    code = "CANNOT_SUPPORT_OWN_BET"

    def __init__(self, bet_id: str):
        super().__init__(message="You can't support your own bet", details={"bet_id": bet_id})


class SupportWindowClosedError(BetOnYouException):
    http_status = status.HTTP_409_CONFLICT
    code = "SUPPORT_WINDOW_CLOSED"

    def __init__(self, bet_id: str, window_days: int):
        super().__init__(
            message=f"This bet is older than {window_days} days and can no longer be supported",
            details={"bet_id": bet_id, "window_days": window_days},
        )


class AlreadySupportingError(BetOnYouException):
    http_status = status.HTTP_409_CONFLICT
    code = "ALREADY_SUPPORTING"

    def __init__(self, bet_id: str):
        super().__init__(message="You're already supporting this bet", details={"bet_id": bet_id})


# --- shop -------------------------------------------------------------------

class AvatarNotFoundError(BetOnYouException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "AVATAR_NOT_FOUND"

    def __init__(self, avatar_id: int):
        super().__init__(message="Avatar not found", details={"avatar_id": avatar_id})


class CollectibleNotFoundError(BetOnYouException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "COLLECTIBLE_NOT_FOUND"

    def __init__(self, collectible_id: int):
        super().__init__(message="Collectible not found", details={"collectible_id": collectible_id})


class AlreadyOwnedError(BetOnYouException):
    http_status = status.HTTP_409_CONFLICT
    code = "ALREADY_OWNED"

    def __init__(self, item: str, item_id: int):
        super().__init__(
            message=f"You already own this {item}.",
            details={"item": item, "item_id": item_id},
        )


class AvatarNotOwnedError(BetOnYouException):
    http_status = status.HTTP_403_FORBIDDEN
    code = "AVATAR_NOT_OWNED"

    def __init__(self, avatar_id: int):
        super().__init__(
            message="You can only activate avatars you own.",
            details={"avatar_id": avatar_id},
        )


# --- email ------------------------------------------------------------------

class EmailNotConfiguredError(BetOnYouException):
    http_status = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "EMAIL_NOT_CONFIGURED"

    def __init__(self):
        super().__init__(message="Email service not configured")


class NoBuddyEmailError(BetOnYouException):
    http_status = status.HTTP_400_BAD_REQUEST
    code = "NO_BUDDY_EMAIL"

    def __init__(self, bet_id: str):
        super().__init__(
            message="No buddy email configured for this bet",
            details={"bet_id": bet_id},
        )


class EmailDeliveryError(BetOnYouException):
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "EMAIL_DELIVERY_FAILED"

    def __init__(self, provider_error: str | None = None):
        super().__init__(
            message="Failed to send email",
            details={"provider_error": provider_error} if provider_error else {},
        )


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def betonyou_exception_handler(request: Request, exc: BetOnYouException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return structured 422 with machine-readable field errors."""
    field_errors = []
    for error in exc.errors():
        field_errors.append({
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": error["msg"],
            "type": error["type"],
        })
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "code": "VALIDATION_ERROR",
            "message": "Request validation failed.",
            "error": "Request validation failed.",
            "details": {"errors": field_errors},
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_exception", path=request.url.path, method=request.method)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
            "error": "An unexpected error occurred.",
        },
    )

"""
Shared schema primitives used across the API.
"""
from typing import Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error envelope returned for all 4xx/5xx responses."""

    code: str
    message: str
    error: str = ""
    details: Optional[dict[str, Any]] = None


AUTH_RESPONSES: dict = {
    401: {"model": ErrorResponse, "description": "Missing or invalid bearer token."},
}

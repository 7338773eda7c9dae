"""
Wall schemas.

GET /wall → WallListResponse
"""
from typing import Any, Optional
from pydantic import BaseModel, Field


class WallBetSummary(BaseModel):
    id: str
    user_id: str
    status: str
    stake_amount: int
    duration_weeks: int
    current_week: int
    created_at: str


class WallEventResponse(BaseModel):
    id: int
    event_type: str = Field(
        description='"signup" | "bet_created" | "bet_won" | "bet_lost" | "milestone"'
    )
    user_id: Optional[str]
    display_name: Optional[str]
    avatar_emoji: Optional[str]
    bet_id: Optional[str]
    bet: Optional[WallBetSummary] = None
    metadata: Optional[dict[str, Any]] = Field(
        default=None,
        description="Context specific to each event_type.",
    )
    supportable: bool = Field(
        description="True for bet_created events whose bet still accepts supporters."
    )
    created_at: str


class WallListResponse(BaseModel):
    total: int
    items: list[WallEventResponse]

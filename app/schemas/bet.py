"""
Bet schemas.

POST /bets                 → CreateBetRequest  → BetResponse
GET  /bets                 → BetListResponse
GET  /bets/{id}            → BetDetailResponse
POST /bets/{id}/checkin    → CheckinRequest    → CheckinResponse
POST /bets/{id}/supports   → SupportRequest    → SupportResponse
"""
from __future__ import annotations

from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.models.bet import BetCategory, BuddyRelationship
from app.services.bets import HABIT_MAX_LENGTH, MAX_STAKE, MAX_WEEKS, MIN_STAKE, MIN_WEEKS
from app.services.supports import SUPPORT_MAX_STAKE, SUPPORT_MIN_STAKE


class CreateBetRequest(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    habit_description: Annotated[str, Field(
        min_length=1,
        max_length=HABIT_MAX_LENGTH,
        description="The weekly habit being staked on.",
        examples=["Go to the gym 3 times per week"],
    )]
    category: Optional[BetCategory] = Field(default=None, examples=["health"])
    stake_amount: int = Field(ge=MIN_STAKE, le=MAX_STAKE, examples=[100])
    duration_weeks: int = Field(ge=MIN_WEEKS, le=MAX_WEEKS, examples=[4])
    buddy_email: Optional[EmailStr] = Field(
        default=None,
        description="Accountability buddy notified on check-ins.",
    )
    buddy_relationship: Optional[BuddyRelationship] = Field(default=None, examples=["friend"])

    @field_validator("habit_description", mode="before")
    @classmethod
    def strip_and_check_empty(cls, v: str) -> str:
        stripped = v.strip() if isinstance(v, str) else v
        if not stripped:
            raise ValueError("habit description must not be empty after stripping whitespace")
        return stripped

    @field_validator("buddy_email", mode="before")
    @classmethod
    def blank_email_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class BetResponse(BaseModel):
    id: str
    user_id: str
    habit_description: str
    category: Optional[str]
    stake_amount: int
    duration_weeks: int
    current_week: int
    status: str
    buddy_email: Optional[str]
    buddy_relationship: Optional[str]
    potential_payout: int
    week_deadline: Optional[str] = Field(
        default=None, description="Check-in deadline of the current week (active bets only)."
    )
    started_at: str
    completed_at: Optional[str]
    created_at: str


class BetListResponse(BaseModel):
    total: int
    items: list[BetResponse]


class CheckinOut(BaseModel):
    id: str
    week_number: int
    completed: bool
    checked_in_at: Optional[str]
    buddy_notified: bool


class SupportOut(BaseModel):
    id: str
    bet_id: str
    supporter_id: str
    stake_amount: int
    payout_amount: Optional[int]
    potential_payout: int
    created_at: str


class BetDetailResponse(BetResponse):
    checkins: list[CheckinOut]
    supports: list[SupportOut]


class CheckinRequest(BaseModel):
    notify_buddy: bool = Field(
        default=False,
        description="Email the accountability buddy (ignored when the bet has none).",
    )


class CheckinResponse(BaseModel):
    success: bool
    week: int = Field(description="The week that was just completed.")
    won: bool
    payout: int
    buddy_email_sent: bool
    bet: BetResponse


class SupportRequest(BaseModel):
    stake_amount: int = Field(ge=SUPPORT_MIN_STAKE, le=SUPPORT_MAX_STAKE, examples=[50])


class SupportResponse(SupportOut):
    pass

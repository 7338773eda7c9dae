"""
Profile schemas.

POST /profiles/me              → CreateProfileRequest → ProfileResponse
GET  /profiles/me              → ProfileResponse
POST /profiles/me/login-bonus  → LoginBonusResponse
GET  /profiles/me/ledger       → LedgerListResponse
PUT  /profiles/me/active-avatar → SetActiveAvatarRequest → ProfileResponse
"""
from typing import Annotated, Optional

from pydantic import BaseModel, Field, field_validator


class CreateProfileRequest(BaseModel):
    display_name: Annotated[Optional[str], Field(
        default=None,
        max_length=64,
        description="Public name shown on the wall.",
        examples=["Ana"],
    )]
    timezone: str = Field(
        default="UTC",
        max_length=64,
        description="IANA timezone used to decide when a new bonus day starts.",
        examples=["Europe/Madrid"],
    )

    @field_validator("display_name", mode="before")
    @classmethod
    def strip_display_name(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v


class ActiveAvatarOut(BaseModel):
    id: int
    emoji: str
    name: str


class ProfileResponse(BaseModel):
    id: str
    display_name: Optional[str]
    avatar_url: Optional[str]
    balance: int
    timezone: str
    active_avatar: Optional[ActiveAvatarOut] = None
    last_login_bonus_at: Optional[str]
    bonus_available: bool
    created_at: str


class LoginBonusResponse(BaseModel):
    credited: int = Field(description="Coins credited by this call; 0 if already claimed today.")
    balance: int


class LedgerEntryResponse(BaseModel):
    id: int
    amount: int
    balance_after: int
    reason: str
    bet_id: Optional[str]
    reference: Optional[str]
    created_at: str


class LedgerListResponse(BaseModel):
    total: int
    balance: int
    items: list[LedgerEntryResponse]


class SetActiveAvatarRequest(BaseModel):
    avatar_id: int = Field(ge=1)

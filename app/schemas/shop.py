from typing import Optional
from pydantic import BaseModel


class AvatarResponse(BaseModel):
    id: int
    emoji: str
    name: str
    category: str
    price: int
    personality_voice: Optional[str]
    is_premium: bool
    encouragement_messages: Optional[list[str]]
    owned: bool


class CollectibleResponse(BaseModel):
    id: int
    emoji: str
    name: str
    tier: str
    price: int
    owned: bool


class CollectibleListResponse(BaseModel):
    total: int
    owned: int
    items: list[CollectibleResponse]


class PurchaseResponse(BaseModel):
    success: bool
    balance: int

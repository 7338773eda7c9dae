from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class BuddyEmailRequest(BaseModel):
    """Body of POST /email/buddy. Field names match the camelCase the web client sends."""
    model_config = ConfigDict(populate_by_name=True)

    bet_id: Optional[str] = Field(default=None, alias="betId")
    user_id: Optional[str] = Field(default=None, alias="userId")


class BuddyEmailResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message_id: Optional[str] = Field(default=None, alias="messageId")

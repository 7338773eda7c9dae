"""
Email router.

POST /email/buddy   : notify a bet's accountability buddy of a check-in
"""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.errors import InvalidRequestError
from app.db.base import get_db
from app.schemas.buddy_email import BuddyEmailRequest, BuddyEmailResponse
from app.services.buddy_email import get_email_client, send_buddy_checkin_email

router = APIRouter(prefix="/email", tags=["email"])


@router.post(
    "/buddy",
    response_model=BuddyEmailResponse,
    summary="Email the accountability buddy",
    responses={
        400: {"description": "Missing betId/userId, or the bet has no buddy email."},
        403: {"description": "userId does not own the bet."},
        404: {"description": "Bet not found."},
        500: {"description": "Email provider rejected the message."},
        503: {"description": "Email service not configured."},
    },
)
def send_buddy_email(payload: BuddyEmailRequest, db: Session = Depends(get_db)):
    """Returns the provider's message id as `messageId`."""
    client = get_email_client()
    if not payload.bet_id or not payload.user_id:
        raise InvalidRequestError("Missing betId or userId")
    message_id = send_buddy_checkin_email(
        db=db,
        bet_id=payload.bet_id,
        user_id=payload.user_id,
        client=client,
    )
    return BuddyEmailResponse(success=True, message_id=message_id)

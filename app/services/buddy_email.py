"""
Buddy notification email, sent through the Resend HTTP API.

send_buddy_checkin_email(db, bet_id, user_id) → provider message id

The template returns (subject, html_body, text_body) and uses inline CSS
only, for email client compatibility.
"""
from __future__ import annotations

from html import escape
from typing import Optional

import httpx
import structlog
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.enums import enum_value
from app.core.errors import (
    BetNotFoundError,
    EmailDeliveryError,
    EmailNotConfiguredError,
    NoBuddyEmailError,
    NotBetOwnerError,
)
from app.models.bet import Bet
from app.models.profile import Profile

logger = structlog.get_logger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"

AMBER = "#f59e0b"
ORANGE = "#f97316"
TEXT_DARK = "#374151"
TEXT_MUTED = "#6b7280"


def buddy_checkin_email(
    user_name: str,
    relationship: str,
    habit: str,
    current_week: int,
    duration_weeks: int,
    app_url: str,
) -> tuple[str, str, str]:
    """Render the check-in notification. Progress counts weeks before the current one."""
    completed = current_week - 1
    percent = round(completed / duration_weeks * 100) if duration_weeks else 0
    name = escape(user_name)
    subject = f"{user_name} just checked in on their habit!"

    html_body = f"""\
<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Check-in Update</title>
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Helvetica, Arial, sans-serif; background-color: #f5f5f4; margin: 0; padding: 20px;">
  <div style="max-width: 560px; margin: 0 auto; background-color: white; border-radius: 16px; overflow: hidden;">
    <div style="background: linear-gradient(135deg, {AMBER}, {ORANGE}); padding: 32px; text-align: center;">
      <div style="font-size: 48px; margin-bottom: 8px;">&#127919;</div>
      <h1 style="color: white; margin: 0; font-size: 24px;">Check-in Update!</h1>
    </div>
    <div style="padding: 32px;">
      <p style="color: {TEXT_DARK}; font-size: 16px; line-height: 1.6; margin: 0 0 16px 0;">
        Hey there! Great news from your {escape(relationship)}:
      </p>
      <div style="background-color: #fef3c7; border-radius: 12px; padding: 20px; margin: 24px 0;">
        <p style="color: #92400e; font-size: 18px; font-weight: 600; margin: 0 0 8px 0;">{name} just checked in!</p>
        <p style="color: #78350f; font-size: 14px; margin: 0 0 12px 0;"><strong>Habit:</strong> {escape(habit)}</p>
        <p style="color: #78350f; font-size: 14px; margin: 0;"><strong>Progress:</strong> Week {current_week} of {duration_weeks}</p>
      </div>
      <p style="color: {TEXT_MUTED}; font-size: 14px; line-height: 1.6; margin: 0 0 24px 0;">
        Your accountability matters! A quick message of encouragement can make all the difference in helping {name} reach their goal.
      </p>
      <div style="background-color: #e5e7eb; border-radius: 9999px; height: 8px; overflow: hidden; margin-bottom: 8px;">
        <div style="background: linear-gradient(90deg, {AMBER}, {ORANGE}); height: 100%; width: {percent}%; border-radius: 9999px;"></div>
      </div>
      <p style="color: #9ca3af; font-size: 12px; text-align: center; margin: 0 0 24px 0;">
        {completed} of {duration_weeks} weeks completed
      </p>
      <div style="text-align: center;">
        <a href="{escape(app_url, quote=True)}" style="display: inline-block; background: linear-gradient(135deg, {AMBER}, {ORANGE}); color: white; text-decoration: none; padding: 12px 32px; border-radius: 8px; font-weight: 600; font-size: 14px;">
          View on Bet On Yourself
        </a>
      </div>
    </div>
    <div style="background-color: #f9fafb; padding: 20px 32px; text-align: center; border-top: 1px solid #e5e7eb;">
      <p style="color: #9ca3af; font-size: 12px; margin: 0;">
        You're receiving this because {name} added you as their accountability buddy on Bet On Yourself.
      </p>
    </div>
  </div>
</body>
</html>
"""

    text_body = (
        f"Hey there! Great news from your {relationship}:\n\n"
        f"{user_name} just checked in!\n"
        f"Habit: {habit}\n"
        f"Progress: Week {current_week} of {duration_weeks} "
        f"({completed} of {duration_weeks} weeks completed)\n\n"
        f"View on Bet On Yourself: {app_url}\n"
    )
    return subject, html_body, text_body


class ResendClient:
    """Minimal Resend API client (POST /emails)."""

    def __init__(self, api_key: str, from_address: str, timeout: float = 10.0) -> None:
        self.api_key = api_key
        self.from_address = from_address
        self.timeout = timeout

    def send(self, to_email: str, subject: str, html_body: str, text_body: str) -> str:
        """Send one email and return the provider's message id."""
        try:
            response = httpx.post(
                RESEND_API_URL,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json={
                    "from": self.from_address,
                    "to": [to_email],
                    "subject": subject,
                    "html": html_body,
                    "text": text_body,
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
            if not isinstance(payload, dict):
                raise ValueError(f"unexpected response body: {payload!r}")
        except (httpx.HTTPError, ValueError) as exc:
            logger.exception("buddy_email_failed", to=to_email, provider="resend")
            raise EmailDeliveryError(str(exc)) from exc
        return str(payload.get("id", ""))


def get_email_client() -> ResendClient:
    if not settings.RESEND_API_KEY:
        raise EmailNotConfiguredError()
    return ResendClient(api_key=settings.RESEND_API_KEY, from_address=settings.EMAIL_FROM)


def send_buddy_checkin_email(
    db: Session,
    bet_id: str,
    user_id: str,
    client: Optional[ResendClient] = None,
) -> str:
    """Notify the bet's accountability buddy about a check-in. Returns the message id."""
    client = client or get_email_client()

    bet = db.get(Bet, bet_id)
    if bet is None:
        raise BetNotFoundError(bet_id)
    if bet.user_id != user_id:
        raise NotBetOwnerError(bet_id)
    if not bet.buddy_email:
        raise NoBuddyEmailError(bet_id)

    owner = db.get(Profile, bet.user_id)
    user_name = (owner.display_name if owner else None) or "Your friend"
    relationship = enum_value(bet.buddy_relationship) if bet.buddy_relationship else "friend"

    subject, html_body, text_body = buddy_checkin_email(
        user_name=user_name,
        relationship=relationship,
        habit=bet.habit_description,
        current_week=bet.current_week,
        duration_weeks=bet.duration_weeks,
        app_url=settings.APP_URL,
    )
    message_id = client.send(bet.buddy_email, subject, html_body, text_body)
    logger.info("buddy_email_sent", bet_id=bet_id, message_id=message_id)
    return message_id

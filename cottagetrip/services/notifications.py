import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from cottagetrip.core.errors import DispatchError, ValidationError

logger = logging.getLogger(__name__)

RESEND_EMAILS_URL = "https://api.resend.com/emails"
REMINDER_SUBJECT = "Friendly reminder about your cottage trip balance"


@dataclass(frozen=True)
class ReminderMessage:
    room_id: str
    from_user_id: str
    to_user_id: str
    amount_cents: int
    link: str
    to_email: str | None = None
    to_name: str | None = None

    @property
    def amount_formatted(self) -> str:
        return f"${self.amount_cents // 100}.{self.amount_cents % 100:02d}"


def render_reminder_html(message: ReminderMessage) -> str:
    name = message.to_name or "there"
    return (
        f"<p>Hi {name},</p>"
        f"<p>Friendly reminder you still owe <strong>{message.amount_formatted}</strong> for the cottage trip.</p>"
        f'<p><a href="{message.link}">View Costs</a></p>'
        "<p>Thanks,<br>The CottageTrip Team</p>"
    )


class ReminderDispatcher(Protocol):
    async def send(self, message: ReminderMessage) -> None: ...


class LoggingDispatcher:
    async def send(self, message: ReminderMessage) -> None:
        logger.info(
            "payment reminder room=%s from=%s to=%s amount=%s",
            message.room_id, message.from_user_id, message.to_user_id, message.amount_formatted,
        )


class ResendDispatcher:
    """Emails permitted reminders through the Resend API."""

    def __init__(self, client: httpx.AsyncClient, api_key: str, from_email: str, url: str = RESEND_EMAILS_URL):
        self.client = client
        self.api_key = api_key
        self.from_email = from_email
        self.url = url

    async def send(self, message: ReminderMessage) -> None:
        if not message.to_email or "@" not in message.to_email:
            logger.error("no usable email for reminder room=%s to=%s", message.room_id, message.to_user_id)
            raise ValidationError("Invalid email address for recipient")

        payload = {
            "from": self.from_email,
            "to": [message.to_email],
            "subject": REMINDER_SUBJECT,
            "html": render_reminder_html(message),
        }

        try:
            res = await self.client.post(
                self.url,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"}
            )
            res.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("reminder email failed room=%s to=%s: %s", message.room_id, message.to_user_id, e)
            raise DispatchError() from e

        logger.info("reminder email sent room=%s to=%s id=%s", message.room_id, message.to_user_id, res.json().get("id"))

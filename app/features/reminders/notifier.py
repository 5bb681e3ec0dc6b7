"""
Reminder notifier: renders reminder text and pushes it to the recipient via Telegram
"""
import logging
from typing import Any, Dict, Optional, Protocol

import httpx

from app.schemas import ReminderSnapshot
from app.services.common import escape_markdown

logger = logging.getLogger("reminders.notifier")

DEFAULT_REMINDER_TEXT = "You have a reminder!"


class NotifierError(Exception):
    """Raised when a message could not be handed to the transport."""


class Notifier(Protocol):
    async def send(self, recipient_id: int, text: str) -> None: ...


def format_reminder_message(reminder: ReminderSnapshot) -> str:
    """Build the notification body (Telegram legacy Markdown)."""
    parts = ["🔔 *Reminder!*"]

    body = (reminder.message or "").strip()
    parts.append(escape_markdown(body) if body else DEFAULT_REMINDER_TEXT)

    if reminder.related_task_id is not None:
        parts.append(f"📝 Related to task #{reminder.related_task_id}")

    if reminder.is_recurring:
        notice = "🔄 This is a recurring reminder"
        if reminder.recurrence_pattern:
            notice += f" ({escape_markdown(reminder.recurrence_pattern)})"
        parts.append(notice)

    return "\n\n".join(parts)


class TelegramNotifier:
    """Sends messages through the Bot API `sendMessage` method."""

    def __init__(
        self,
        token: str,
        *,
        api_base: str = "https://api.telegram.org",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        if not token:
            raise ValueError("Telegram bot token is required")
        self._url = f"{api_base.rstrip('/')}/bot{token}/sendMessage"
        self._timeout = timeout
        self._client = client

    async def send(self, recipient_id: int, text: str) -> None:
        payload: Dict[str, Any] = {
            "chat_id": recipient_id,
            "text": text,
            "parse_mode": "Markdown",
        }
        try:
            if self._client is not None:
                resp = await self._client.post(self._url, json=payload, timeout=self._timeout)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    resp = await client.post(self._url, json=payload)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("Failed to send reminder to %s (%s)", recipient_id, e.response.status_code)
            raise NotifierError(f"Telegram returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error("Failed to send reminder to %s: %s", recipient_id, e)
            raise NotifierError(str(e) or e.__class__.__name__) from e

        body = _json_or_none(resp)
        if isinstance(body, dict) and body.get("ok") is False:
            description = body.get("description") or "unknown error"
            logger.error("Telegram rejected message for %s: %s", recipient_id, description)
            raise NotifierError(f"Telegram rejected message: {description}")

        logger.debug("Message delivered to %s", recipient_id)


def _json_or_none(resp: httpx.Response) -> Optional[Any]:
    try:
        return resp.json()
    except ValueError:
        return None

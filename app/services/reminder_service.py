import logging
from datetime import datetime
from typing import Optional, List
from app import crud
from app.config import get_settings
from app.services.common import format_datetime, parse_relative_time, truncate_text, utc_now

logger = logging.getLogger("services.reminder")


class ReminderValidationError(ValueError):
    pass


class ReminderNotFoundError(LookupError):
    pass


class ReminderAccessError(PermissionError):
    pass


async def create_reminder(
    owner_id: int,
    remind_in: str,
    message: Optional[str] = None,
    related_task_id: Optional[int] = None,
    *,
    now: Optional[datetime] = None,
):
    now = now or utc_now()
    due_at = parse_relative_time(remind_in, now)
    if due_at is None:
        raise ReminderValidationError("Invalid time format. Use: 30m, 2h, 1d")
    if due_at <= now:
        raise ReminderValidationError("Reminder time must be in the future")

    message = (message or "").strip() or None
    max_len = get_settings().reminder_message_max_length
    if message and len(message) > max_len:
        raise ReminderValidationError(f"Message is too long (max {max_len} chars)")

    reminder = await crud.create_reminder(owner_id, due_at, message, related_task_id=related_task_id)
    logger.info(
        "Reminder %s created for %s, due %s: %s",
        reminder.id,
        owner_id,
        format_datetime(due_at),
        truncate_text(message or "-", 50),
    )
    return reminder


async def list_reminders(owner_id: int) -> List:
    return await crud.get_active_reminders(owner_id)


async def cancel_reminder(owner_id: int, reminder_id: int) -> None:
    reminder = await crud.get_reminder(reminder_id)
    if reminder is None:
        raise ReminderNotFoundError(f"Reminder {reminder_id} not found")
    if reminder.owner_id != owner_id:
        logger.warning("Owner %s tried to cancel reminder %s owned by %s", owner_id, reminder_id, reminder.owner_id)
        raise ReminderAccessError("This is not your reminder")
    if not await crud.delete_reminder(reminder_id):
        # Removed concurrently between the lookup and the delete
        raise ReminderNotFoundError(f"Reminder {reminder_id} not found")

"""
Reminder service: builds the delivery engine from settings and runs it for the process lifetime
"""
import logging
from typing import Optional

from app.config import Settings, get_settings
from app.features.reminders.notifier import Notifier, TelegramNotifier
from app.features.reminders.scheduler import ReminderScheduler

logger = logging.getLogger("reminders.service")


def build_reminder_scheduler(
    settings: Optional[Settings] = None,
    notifier: Optional[Notifier] = None,
) -> Optional[ReminderScheduler]:
    """Create the scheduler, or None when reminders are disabled or no transport is configured."""
    settings = settings or get_settings()

    if not settings.reminders_enabled:
        logger.info("Reminder scheduler disabled (REMINDERS_ENABLED is false)")
        return None

    if notifier is None:
        if not settings.telegram_bot_token:
            logger.warning("No TELEGRAM_BOT_TOKEN configured, reminders will not be delivered")
            return None
        notifier = TelegramNotifier(
            settings.telegram_bot_token,
            api_base=settings.telegram_api_base,
            timeout=settings.notifier_timeout_seconds,
        )

    return ReminderScheduler(
        notifier,
        poll_interval_seconds=settings.reminder_poll_interval_seconds,
        batch_limit=settings.reminder_batch_limit,
        max_tracked=settings.reminder_max_tracked,
    )


async def start_reminder_scheduler(
    settings: Optional[Settings] = None,
    notifier: Optional[Notifier] = None,
) -> Optional[ReminderScheduler]:
    """Build and start the background scheduler. Call from a running event loop."""
    scheduler = build_reminder_scheduler(settings, notifier)
    if scheduler is None:
        return None
    scheduler.start()
    return scheduler


async def stop_reminder_scheduler(scheduler: Optional[ReminderScheduler]) -> None:
    """Stop the background scheduler if one is running."""
    if scheduler is None:
        logger.warning("Scheduler not running")
        return
    await scheduler.stop()


def is_scheduler_running(scheduler: Optional[ReminderScheduler]) -> bool:
    return scheduler is not None and scheduler.is_running

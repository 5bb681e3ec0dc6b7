"""
Reminder feature module: discovers due reminders and delivers them as push notifications
"""
from .notifier import NotifierError, TelegramNotifier, format_reminder_message
from .scheduler import DeliveryState, ReminderScheduler
from .service import build_reminder_scheduler, start_reminder_scheduler, stop_reminder_scheduler, is_scheduler_running
from .tracking import TrackedReminders

__all__ = [
    "DeliveryState",
    "NotifierError",
    "ReminderScheduler",
    "TelegramNotifier",
    "TrackedReminders",
    "build_reminder_scheduler",
    "format_reminder_message",
    "is_scheduler_running",
    "start_reminder_scheduler",
    "stop_reminder_scheduler",
]

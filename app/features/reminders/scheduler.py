"""
Reminder scheduler: discovers due reminders and delivers each one from its own task

1. An APScheduler interval job runs a discovery pass (every 30s by default).
2. Each due reminder not yet tracked gets its own asyncio task.
3. The task waits until the due time, sends, then marks the reminder as sent.
"""
import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Awaitable, Callable, Optional, Set

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app import crud
from app.schemas import ReminderSnapshot
from app.services.common import utc_now
from app.features.reminders.notifier import Notifier, format_reminder_message
from app.features.reminders.tracking import TrackedReminders

logger = logging.getLogger("reminders.scheduler")

DEFAULT_POLL_INTERVAL_SECONDS = 30
DEFAULT_BATCH_LIMIT = 100
DEFAULT_MAX_TRACKED = 100_000

DISCOVERY_JOB_ID = "reminder_discovery"


class DeliveryState(str, Enum):
    waiting = "waiting"
    sending = "sending"
    committing = "committing"
    done = "done"
    failed = "failed"


class ReminderScheduler:
    def __init__(
        self,
        notifier: Notifier,
        *,
        tracked: Optional[TrackedReminders] = None,
        poll_interval_seconds: int = DEFAULT_POLL_INTERVAL_SECONDS,
        batch_limit: int = DEFAULT_BATCH_LIMIT,
        max_tracked: int = DEFAULT_MAX_TRACKED,
        clock: Callable[[], datetime] = utc_now,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.notifier = notifier
        self.tracked = tracked if tracked is not None else TrackedReminders()
        self.poll_interval_seconds = poll_interval_seconds
        self.batch_limit = batch_limit
        self.max_tracked = max_tracked
        self._clock = clock
        self._sleep = sleep
        self._tasks: Set[asyncio.Task] = set()
        self._scheduler: Optional[AsyncIOScheduler] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Register the discovery job. Must be called from a running event loop."""
        if self.is_running:
            logger.warning("Reminder scheduler already running")
            return

        self._scheduler = AsyncIOScheduler(timezone=timezone.utc)
        self._scheduler.add_job(
            self.run_discovery_pass,
            trigger=IntervalTrigger(seconds=self.poll_interval_seconds),
            id=DISCOVERY_JOB_ID,
            name="Discover and schedule due reminders",
            replace_existing=True,
            max_instances=1,  # Prevent overlapping passes
            coalesce=True,
            next_run_time=datetime.now(timezone.utc),  # First pass right away
        )
        self._scheduler.start()
        logger.info("Starting reminder scheduler (checking every %d seconds)", self.poll_interval_seconds)

    async def stop(self) -> None:
        """Stop discovery and abandon in-flight waits; unsent reminders redeliver after restart."""
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None

        pending = [t for t in self._tasks if not t.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        logger.info("Reminder scheduler stopped (%d delivery task(s) abandoned)", len(pending))

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    @property
    def in_flight(self) -> int:
        return sum(1 for t in self._tasks if not t.done())

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    async def run_discovery_pass(self) -> None:
        """Interval job body. A failed pass is logged and retried on the next tick."""
        try:
            await self.check_and_schedule()
        except Exception as e:
            logger.error("Scheduler error: %s", e)

    async def check_and_schedule(self) -> int:
        """Run one discovery pass. Returns the number of reminders dispatched."""
        dropped = await self.tracked.clear_if_over(self.max_tracked)
        if dropped:
            logger.warning("Cleared scheduled reminder ids (%d tracked, limit %d)", dropped, self.max_tracked)

        reminders = await crud.get_due_reminders(self._clock(), limit=self.batch_limit)

        dispatched = 0
        for row in reminders:
            reminder = ReminderSnapshot.model_validate(row)
            if not await self.tracked.add(reminder.id):
                continue
            self.dispatch(reminder)
            dispatched += 1

        logger.debug(
            "Scheduler check completed. Dispatched: %d, total scheduled: %d",
            dispatched,
            await self.tracked.size(),
        )
        return dispatched

    # ------------------------------------------------------------------
    # Dispatch & delivery
    # ------------------------------------------------------------------

    def delay_for(self, reminder: ReminderSnapshot) -> float:
        """Seconds until the reminder is due, never negative."""
        return max(0.0, (reminder.due_at - self._clock()).total_seconds())

    def dispatch(self, reminder: ReminderSnapshot) -> asyncio.Task:
        delay = self.delay_for(reminder)
        if delay > 0:
            logger.debug("Scheduled reminder %s to be sent in %.0f seconds", reminder.id, delay)
        task = asyncio.create_task(self.deliver(reminder, delay), name=f"reminder-{reminder.id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def deliver(self, reminder: ReminderSnapshot, delay: float = 0.0) -> DeliveryState:
        """
        Wait, send, then commit. The id always leaves the tracked set when
        this returns, so an unsent reminder is picked up again by a later pass.
        """
        state = DeliveryState.waiting
        try:
            if delay > 0:
                await self._sleep(delay)

            state = DeliveryState.sending
            try:
                await self.notifier.send(reminder.owner_id, format_reminder_message(reminder))
            except Exception as e:
                logger.error("Failed to send reminder %s: %s", reminder.id, e)
                state = DeliveryState.failed
                return state

            state = DeliveryState.committing
            try:
                if not await crud.mark_reminder_sent(reminder.id):
                    logger.info("Reminder %s was deleted before it could be marked as sent", reminder.id)
            except Exception as e:
                logger.error("Failed to mark reminder %s as sent: %s", reminder.id, e)

            state = DeliveryState.done
            logger.info("Reminder %s sent successfully", reminder.id)
            return state
        finally:
            await self.tracked.discard(reminder.id)
            logger.debug("Reminder %s finished in state %s", reminder.id, state.value)

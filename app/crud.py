import logging
from datetime import datetime, timezone
from typing import Optional, List
from sqlalchemy import select, update, asc
from app import database
from app.models import models as db
from app.services.common import ensure_utc

logger = logging.getLogger("crud")


# --- Generic DB helpers ------------------------------------------------------

async def _get_or_none(session, model, id_):
    obj = await session.get(model, id_)
    if not obj:
        logger.warning("%s with id=%s not found.", model.__name__, id_)
    return obj


async def _commit_refresh(session, obj):
    await session.commit()
    await session.refresh(obj)
    return obj


# --- Reminder Operations -----------------------------------------------------

async def create_reminder(
    owner_id: int,
    due_at: datetime,
    message: Optional[str] = None,
    *,
    related_task_id: Optional[int] = None,
    is_recurring: bool = False,
    recurrence_pattern: Optional[str] = None,
) -> db.Reminder:
    async with database.AsyncSessionLocal() as dbs:
        reminder = db.Reminder(
            owner_id=owner_id,
            due_at=ensure_utc(due_at),
            message=message,
            related_task_id=related_task_id,
            is_recurring=is_recurring,
            recurrence_pattern=recurrence_pattern,
            is_sent=False,
        )
        dbs.add(reminder)
        await _commit_refresh(dbs, reminder)
        logger.info("Created reminder %s for owner %s", reminder.id, owner_id)
        return reminder


async def get_reminder(reminder_id: int) -> Optional[db.Reminder]:
    async with database.AsyncSessionLocal() as dbs:
        return await _get_or_none(dbs, db.Reminder, reminder_id)


async def get_due_reminders(before: datetime, limit: int = 100) -> List[db.Reminder]:
    """Unsent reminders due at or before `before`, oldest first."""
    async with database.AsyncSessionLocal() as dbs:
        stmt = (
            select(db.Reminder)
            .where(db.Reminder.is_sent.is_(False))
            .where(db.Reminder.due_at <= ensure_utc(before))
            .order_by(asc(db.Reminder.due_at), asc(db.Reminder.id))
            .limit(limit)
        )
        result = await dbs.execute(stmt)
        reminders = list(result.scalars())
        logger.debug("Found %d pending reminders", len(reminders))
        return reminders


async def mark_reminder_sent(reminder_id: int) -> bool:
    """
    Flag a reminder as delivered.
    Returns False when the record no longer exists. An already-sent record
    keeps its original sent_at.
    """
    async with database.AsyncSessionLocal() as dbs:
        reminder = await _get_or_none(dbs, db.Reminder, reminder_id)
        if not reminder:
            return False
        await dbs.execute(
            update(db.Reminder)
            .where(db.Reminder.id == reminder_id)
            .where(db.Reminder.is_sent.is_(False))
            .values(is_sent=True, sent_at=datetime.now(timezone.utc))
        )
        await dbs.commit()
        logger.debug("Marked reminder %s as sent", reminder_id)
        return True


async def delete_reminder(reminder_id: int) -> bool:
    async with database.AsyncSessionLocal() as dbs:
        reminder = await _get_or_none(dbs, db.Reminder, reminder_id)
        if not reminder:
            return False
        await dbs.delete(reminder)
        await dbs.commit()
        logger.info("Deleted reminder %s", reminder_id)
        return True


async def get_active_reminders(owner_id: int) -> List[db.Reminder]:
    async with database.AsyncSessionLocal() as dbs:
        stmt = (
            select(db.Reminder)
            .where(db.Reminder.owner_id == owner_id)
            .where(db.Reminder.is_sent.is_(False))
            .order_by(asc(db.Reminder.due_at))
        )
        result = await dbs.execute(stmt)
        reminders = list(result.scalars())
        logger.info("Fetched %d active reminders for owner %s", len(reminders), owner_id)
        return reminders

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
from datetime import datetime
from app.services.common import ensure_utc


# ---------------------------------------------------------------------------
# Reminder Schemas
# ---------------------------------------------------------------------------
class ReminderCreate(BaseModel):
    owner_id: int = Field(..., description="Recipient of the reminder (Telegram chat id)")
    remind_in: str = Field(..., description="Relative delay such as '30m', '2h' or '1d'")
    message: Optional[str] = Field(None, description="Optional reminder text")
    related_task_id: Optional[int] = Field(None, description="Optional task this reminder refers to")


class ReminderOut(BaseModel):
    id: int = Field(..., description="Unique identifier for the reminder")
    owner_id: int = Field(..., description="Recipient of the reminder")
    due_at: datetime = Field(..., description="When the reminder fires (UTC)")
    message: Optional[str] = Field(None, description="Reminder text")
    related_task_id: Optional[int] = Field(None, description="Related task, display only")
    is_recurring: bool = Field(False, description="Advisory repeat flag")
    recurrence_pattern: Optional[str] = Field(None, description="Advisory repeat cadence")
    is_sent: bool = Field(False, description="Whether the reminder was delivered")
    sent_at: Optional[datetime] = Field(None, description="When the reminder was delivered")

    model_config = ConfigDict(from_attributes=True)

    @field_validator("due_at", "sent_at")
    @classmethod
    def normalize_dates(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value) if value is not None else None


class ReminderList(BaseModel):
    count: int = Field(..., description="Total number of reminders returned")
    reminders: List[ReminderOut] = Field(..., description="Active reminders, soonest first")


class CancelReminderResponse(BaseModel):
    status: str = Field(..., description="Status of the operation")
    reminder_id: int = Field(..., description="ID of the cancelled reminder")


class SchedulerStatus(BaseModel):
    running: bool = Field(..., description="Whether the discovery job is active")
    tracked: int = Field(..., description="Reminder ids currently in the scheduling set")
    in_flight: int = Field(..., description="Delivery tasks that have not finished yet")


# ---------------------------------------------------------------------------
# Scheduler snapshot
# ---------------------------------------------------------------------------
class ReminderSnapshot(BaseModel):
    """Immutable copy of a reminder row owned by a single delivery task."""

    id: int
    owner_id: int
    due_at: datetime
    message: Optional[str] = None
    related_task_id: Optional[int] = None
    is_recurring: bool = False
    recurrence_pattern: Optional[str] = None

    model_config = ConfigDict(from_attributes=True, frozen=True)

    @field_validator("due_at")
    @classmethod
    def normalize_due_at(cls, value: datetime) -> datetime:
        return ensure_utc(value)

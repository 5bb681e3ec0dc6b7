import logging
from fastapi import APIRouter, HTTPException, Request, status
from app import schemas
from app.features.reminders import is_scheduler_running
from app.services import reminder_service

logger = logging.getLogger("routes")
router = APIRouter(tags=["Reminders"])


@router.post("/reminders", response_model=schemas.ReminderOut, status_code=status.HTTP_201_CREATED)
async def post_reminder(body: schemas.ReminderCreate):
    try:
        return await reminder_service.create_reminder(
            body.owner_id,
            body.remind_in,
            body.message,
            related_task_id=body.related_task_id,
        )
    except reminder_service.ReminderValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/reminders", response_model=schemas.ReminderList)
async def get_reminders(owner_id: int):
    reminders = await reminder_service.list_reminders(owner_id)
    return {"count": len(reminders), "reminders": reminders}


@router.get("/reminders/scheduler", response_model=schemas.SchedulerStatus)
async def get_scheduler_status(request: Request):
    scheduler = getattr(request.app.state, "reminder_scheduler", None)
    if scheduler is None:
        return {"running": False, "tracked": 0, "in_flight": 0}
    return {
        "running": is_scheduler_running(scheduler),
        "tracked": await scheduler.tracked.size(),
        "in_flight": scheduler.in_flight,
    }


@router.delete("/reminders/{reminder_id}", response_model=schemas.CancelReminderResponse)
async def delete_reminder(reminder_id: int, owner_id: int):
    try:
        await reminder_service.cancel_reminder(owner_id, reminder_id)
    except reminder_service.ReminderNotFoundError:
        raise HTTPException(status_code=404, detail="Reminder not found")
    except reminder_service.ReminderAccessError:
        raise HTTPException(status_code=403, detail="This is not your reminder")
    return {"status": "ok", "reminder_id": reminder_id}

# main.py
import logging
from fastapi import FastAPI
from contextlib import asynccontextmanager
from app import database
from app.config import get_settings
from app.features.reminders import start_reminder_scheduler, stop_reminder_scheduler
from app.logging import RequestLoggingMiddleware, init_logging
from app.routes import router

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------
init_logging()
logger = logging.getLogger("main")
logger.info("Application starting...")


# ---------------------------------------------------------------------------
# App lifespan (startup/shutdown)
# ---------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown tasks."""
    logger.info("Startup: initializing database...")
    try:
        await database.init_db_async()
        logger.info("Connected to database: %s", database.get_database_dsn())
    except Exception as e:
        logger.critical("Database initialization failed: %s", e)
        raise  # fail fast: app should not start without DB

    # The reminder engine runs for the whole process lifetime
    logger.info("Startup: starting reminder scheduler...")
    app.state.reminder_scheduler = None
    try:
        app.state.reminder_scheduler = await start_reminder_scheduler(get_settings())
    except Exception as e:
        logger.error("Failed to start reminder scheduler: %s", e)

    yield  # app runs during this block

    if app.state.reminder_scheduler is not None:
        logger.info("Shutdown: stopping reminder scheduler...")
        try:
            await stop_reminder_scheduler(app.state.reminder_scheduler)
        except Exception as e:
            logger.error("Error stopping reminder scheduler: %s", e)

    logger.info("Shutdown: closing database connection pool...")
    try:
        await database.shutdown_db_async()
        logger.info("Cleanup complete.")
    except Exception as e:
        logger.error("Error during shutdown cleanup: %s", e)


# ---------------------------------------------------------------------------
# FastAPI Application
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Reminder Delivery Engine",
    version="1.0.0",
    debug=get_settings().debug,
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)


# ---------------------------------------------------------------------------
# Base Routes
# ---------------------------------------------------------------------------

@app.get("/", tags=["Health"])
async def root():
    """Basic health check to verify the service is running."""
    return {"status": "ok", "message": "Reminder engine is running."}


app.include_router(router)

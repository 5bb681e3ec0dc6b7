import importlib.util
import logging
import time
from logging.config import dictConfig

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import get_settings

# ---------------------------------------------------
# Colorlog Availability Check
# ---------------------------------------------------
COLORLOG_AVAILABLE = importlib.util.find_spec("colorlog") is not None


# ---------------------------------------------------
# Logging Configuration
# ---------------------------------------------------
def build_logging_config(level: str) -> dict:
    level = level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
            },
            "color": (
                {
                    "()": "colorlog.ColoredFormatter",
                    "format": "%(log_color)s%(asctime)s %(levelname)s [%(name)s] %(message)s",
                    "log_colors": {
                        "DEBUG": "cyan",
                        "INFO": "green",
                        "WARNING": "yellow",
                        "ERROR": "red",
                        "CRITICAL": "bold_red",
                    },
                }
                if COLORLOG_AVAILABLE
                else {}
            ),
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "color" if COLORLOG_AVAILABLE else "default",
                "level": level,
            },
        },
        "loggers": {
            # Silence uvicorn and APScheduler noise in console
            "uvicorn": {"level": "WARNING"},
            "uvicorn.error": {"level": "WARNING"},
            "uvicorn.access": {"level": "WARNING"},
            "apscheduler": {"level": "WARNING"},
            "httpx": {"level": "WARNING"},
            "sqlalchemy.engine": {
                "level": "WARNING",
                "handlers": ["console"],
                "propagate": False,
            },
            # Delivery logs stay at INFO even when the root logger is quieter
            "reminders": {"level": "DEBUG" if level == "DEBUG" else "INFO"},
        },
        "root": {
            "level": level,
            "handlers": ["console"],
        },
    }


# ---------------------------------------------------
# Initialize Logging
# ---------------------------------------------------
def init_logging(level: str | None = None) -> None:
    dictConfig(build_logging_config(level or get_settings().log_level))


# ---------------------------------------------------
# Request Logging Middleware
# ---------------------------------------------------
class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        logger = logging.getLogger("request")
        start_time = time.time()

        response = await call_next(request)

        duration = (time.time() - start_time) * 1000
        logger.info(
            "%s %s → %s (%.2f ms)",
            request.method,
            request.url.path,
            response.status_code,
            duration,
        )
        return response

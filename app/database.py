import os
import sys
import logging
from typing import Any, Dict, cast
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, async_sessionmaker
from sqlalchemy.pool import NullPool
from sqlalchemy.engine import make_url
from dotenv import load_dotenv
from app.config import get_settings

load_dotenv()
logger = logging.getLogger("database")

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

# Detect pytest reliably during collection and execution
_is_pytest = bool(os.getenv("PYTEST_CURRENT_TEST")) or ("pytest" in sys.modules)

# Tests always use SQLite; the app itself requires an explicit Postgres URL.
TEST_SQLITE_URL = "sqlite+aiosqlite:///./test.db"
_CURRENT_DB_URL: str | None = None


def _detect_driver(url: str) -> str:
    try:
        return make_url(url).drivername
    except Exception:
        return url.split(":", 1)[0]


# ---------------------------------------------------------------------------
# Engine Setup
# ---------------------------------------------------------------------------

def _make_engine() -> AsyncEngine:
    if _is_pytest:
        url = os.getenv("TEST_DATABASE_URL") or TEST_SQLITE_URL
    else:
        url = str(get_settings().database_url or "").strip()
        if not url:
            raise RuntimeError("DATABASE_URL is required and must point at Postgres.")
        if not _detect_driver(url).startswith("postgresql+"):
            raise RuntimeError("Application must use Postgres (postgresql+asyncpg). No SQLite fallback for app.")

    driver = _detect_driver(url)
    engine_kwargs: Dict[str, Any] = {
        "echo": False,
        "pool_pre_ping": True,
    }
    if driver.startswith("postgresql+"):
        engine_kwargs["pool_size"] = 10
        engine_kwargs["max_overflow"] = 5

    # Tests: no pooling so connections never outlive a test's event loop
    if _is_pytest:
        engine_kwargs["poolclass"] = NullPool
        engine_kwargs["pool_pre_ping"] = False

    global _CURRENT_DB_URL
    _CURRENT_DB_URL = url

    return create_async_engine(url, **engine_kwargs)


try:
    async_engine: AsyncEngine = _make_engine()
except Exception as e:
    logger.critical("Failed to initialize async engine: %s", e)
    raise RuntimeError("Database engine initialization failed") from e

AsyncSessionLocal = async_sessionmaker(bind=async_engine, expire_on_commit=False)


# ---------------------------------------------------------------------------
# Utilities
# ---------------------------------------------------------------------------

def get_database_dsn(hide_password: bool = True) -> str:
    """Return the configured DB DSN string (Postgres in app, SQLite in tests)."""
    url_str = _CURRENT_DB_URL or ""
    try:
        url = make_url(cast(str, url_str))
        return url.render_as_string(hide_password=hide_password)
    except Exception:
        return url_str


async def init_db_async():
    """Create tables on startup (migrations own the schema in production)."""
    from app.models import models

    try:
        async with async_engine.begin() as conn:
            await conn.run_sync(models.Base.metadata.create_all)
        logger.info("Database initialized successfully.")
    except Exception as e:
        logger.critical("Database initialization failed: %s", e)
        raise RuntimeError("Failed to initialize database") from e


async def reset_db_async():
    """Drop and recreate every table. Used by the test suite."""
    from app.models import models

    async with async_engine.begin() as conn:
        await conn.run_sync(models.Base.metadata.drop_all)
        await conn.run_sync(models.Base.metadata.create_all)


async def shutdown_db_async():
    """Dispose the async engine cleanly."""
    try:
        await async_engine.dispose()
        logger.info("Database connection pool closed.")
    except Exception as e:
        logger.error("Error shutting down database engine: %s", e)
        raise

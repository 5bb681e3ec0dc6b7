import os
import asyncio
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from fastapi.testclient import TestClient

# Ensure .env is loaded, then FORCE SQLite for tests regardless of .env
load_dotenv()
os.environ["TEST_DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["DATABASE_URL"] = os.environ["TEST_DATABASE_URL"]
# Never talk to Telegram from the test suite
os.environ["REMINDERS_ENABLED"] = "false"
os.environ.pop("TELEGRAM_BOT_TOKEN", None)


# Start each session from a clean SQLite file
@pytest.fixture(scope="session", autouse=True)
def _clean_db_file():
    db_path = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "test.db"))
    if os.path.exists(db_path):
        os.remove(db_path)
    yield


@pytest_asyncio.fixture()
async def db():
    """Fresh reminders table for tests that hit the store."""
    from app import database
    await database.reset_db_async()
    yield


# Shared TestClient for convenience
@pytest.fixture()
def client():
    from app.main import app
    with TestClient(app) as c:
        yield c


# ---------------------------------------------------------------------------
# Scheduler test doubles
# ---------------------------------------------------------------------------

T0 = datetime(2025, 11, 8, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Simulated wall clock; FakeSleep advances it."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class FakeSleep:
    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        self.clock.advance(seconds)
        await asyncio.sleep(0)


class FakeNotifier:
    def __init__(self, clock: Optional[FakeClock] = None, fail_for: Tuple[int, ...] = ()):
        self.clock = clock
        self.fail_for = set(fail_for)
        self.sent: List[Tuple[int, str]] = []
        self.sent_at: List[datetime] = []

    async def send(self, recipient_id: int, text: str) -> None:
        if recipient_id in self.fail_for:
            from app.features.reminders import NotifierError
            raise NotifierError("Bad Gateway")
        self.sent.append((recipient_id, text))
        if self.clock is not None:
            self.sent_at.append(self.clock())


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def fake_sleep(clock):
    return FakeSleep(clock)


@pytest.fixture()
def notifier(clock):
    return FakeNotifier(clock)

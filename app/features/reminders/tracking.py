import asyncio
from typing import Set


class TrackedReminders:
    """
    Reminder ids currently owned by a delivery task in this process.

    Shared by reference between the discovery pass and every delivery task.
    The lock is only held for the set operation itself, never across a wait
    or a network call.
    """

    def __init__(self) -> None:
        self._ids: Set[int] = set()
        self._lock = asyncio.Lock()

    async def add(self, reminder_id: int) -> bool:
        """Insert the id; False if it was already tracked."""
        async with self._lock:
            if reminder_id in self._ids:
                return False
            self._ids.add(reminder_id)
            return True

    async def discard(self, reminder_id: int) -> None:
        async with self._lock:
            self._ids.discard(reminder_id)

    async def contains(self, reminder_id: int) -> bool:
        async with self._lock:
            return reminder_id in self._ids

    async def size(self) -> int:
        async with self._lock:
            return len(self._ids)

    async def clear_if_over(self, ceiling: int) -> int:
        """Drop every id when more than `ceiling` are tracked. Returns how many were dropped."""
        async with self._lock:
            count = len(self._ids)
            if count <= ceiling:
                return 0
            self._ids.clear()
            return count

"""Per-schedule asyncio locks shared by the API and the scheduler sweep."""

import asyncio
import weakref


class ScheduleLockRegistry:
    """
    Hands out one ``asyncio.Lock`` per scheduled order id.

    Serializes user mutations and scheduler executions of the same schedule
    within one process. Cross-process safety comes from the version
    compare-and-swap in the repository.

    Locks are held weakly: an entry disappears once no task holds or waits
    on its lock.
    """

    def __init__(self) -> None:
        self._locks: "weakref.WeakValueDictionary[int, asyncio.Lock]" = weakref.WeakValueDictionary()

    def lock_for(self, schedule_id: int) -> asyncio.Lock:
        lock = self._locks.get(schedule_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[schedule_id] = lock
        return lock

    def __len__(self) -> int:
        return len(self._locks)

import asyncio
import logging
import threading
from typing import Callable, Dict

logger = logging.getLogger(__name__)

# One lock per task name, so a slow tick never overlaps the next tick of the same job
_locks: Dict[str, threading.Lock] = {}
_locks_guard = threading.Lock()


def _lock_for(name: str) -> threading.Lock:
    with _locks_guard:
        return _locks.setdefault(name, threading.Lock())


class PeriodicTask:
    """Run a blocking ``func()`` every ``interval`` seconds from the event loop."""

    def __init__(self, name: str, interval: float, func: Callable[[], object]):
        self.name = name
        self.interval = interval
        self.func = func

    def run_once(self) -> bool:
        """Execute one tick. Returns False when a previous tick still holds the lock."""
        lock = _lock_for(self.name)
        if not lock.acquire(blocking=False):
            logger.warning("Skipping %s tick: previous run still in progress.", self.name)
            return False
        try:
            self.func()
        except Exception:
            logger.exception("Error during scheduled task %s.", self.name)
        finally:
            lock.release()
        return True

    async def run_forever(self) -> None:
        while True:
            await asyncio.to_thread(self.run_once)
            await asyncio.sleep(self.interval)

    def start(self) -> asyncio.Task:
        return asyncio.create_task(self.run_forever(), name=self.name)

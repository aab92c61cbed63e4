"""Delayed side effects (UNO grace expiry, post-win cleanup).

Tasks remember the room version they were scheduled at, but callbacks must
re-read the room and re-check their precondition when they fire.
"""

import heapq
import itertools
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass(order=True)
class ScheduledTask:
    due: float
    seq: int
    name: str = field(compare=False)
    room_code: str = field(compare=False)
    version: int = field(compare=False)
    callback: Callable[["ScheduledTask"], None] = field(compare=False, repr=False)
    cancelled: bool = field(default=False, compare=False)


class Scheduler:
    """A heap of delayed tasks driven by ``run_pending`` or a daemon thread."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._tasks: List[ScheduledTask] = []
        self._seq = itertools.count()
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._stop = threading.Event()

    def schedule(
        self,
        delay: float,
        name: str,
        room_code: str,
        version: int,
        callback: Callable[[ScheduledTask], None],
    ) -> ScheduledTask:
        task = ScheduledTask(
            due=self._clock() + delay,
            seq=next(self._seq),
            name=name,
            room_code=room_code,
            version=version,
            callback=callback,
        )
        with self._lock:
            heapq.heappush(self._tasks, task)
        logger.debug("Scheduled %s for %s in %.1fs", name, room_code, delay)
        return task

    def cancel(self, task: ScheduledTask) -> None:
        task.cancelled = True

    def pending(self) -> List[ScheduledTask]:
        with self._lock:
            return sorted(t for t in self._tasks if not t.cancelled)

    def run_pending(self, now: Optional[float] = None) -> int:
        """Fire every task that is due. Returns how many callbacks ran."""
        now = self._clock() if now is None else now
        due: List[ScheduledTask] = []
        with self._lock:
            while self._tasks and self._tasks[0].due <= now:
                task = heapq.heappop(self._tasks)
                if not task.cancelled:
                    due.append(task)
        for task in due:
            try:
                task.callback(task)
            except Exception:
                logger.exception("Scheduled task %s for %s failed", task.name, task.room_code)
        return len(due)

    def start(self, tick: float = 0.1) -> None:
        if self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, args=(tick,), daemon=True, name="unosync-scheduler")
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def _loop(self, tick: float) -> None:
        while not self._stop.wait(tick):
            self.run_pending()

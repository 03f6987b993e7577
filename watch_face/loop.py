"""Single-threaded message loop that owns all watch face state."""

import heapq
import itertools
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Hashable, Optional

logger = logging.getLogger(__name__)


@dataclass(order=True)
class Message:
    """A callback due at a point on the loop's monotonic clock."""

    due: float
    seq: int
    callback: Callable[..., Any] = field(compare=False)
    args: tuple = field(default=(), compare=False)
    what: Optional[Hashable] = field(default=None, compare=False)
    cancelled: bool = field(default=False, compare=False)


class MainLoop:
    """
    Runs posted callbacks one at a time on the thread that calls ``run``.

    Other threads (touch input, zone watcher, signal handlers) may post
    messages; they are executed on the loop thread only, so no component
    needs its own locking.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._queue: list[Message] = []
        self._seq = itertools.count()
        self._lock = threading.Lock()
        self._wakeup = threading.Event()
        self.running = False

    def now(self) -> float:
        return self._clock()

    def post(
        self, callback: Callable[..., Any], *args, what: Optional[Hashable] = None
    ) -> Message:
        """Queue ``callback(*args)`` to run as soon as possible."""
        return self.post_delayed(callback, 0, *args, what=what)

    def post_delayed(
        self,
        callback: Callable[..., Any],
        delay_ms: float,
        *args,
        what: Optional[Hashable] = None,
    ) -> Message:
        """Queue ``callback(*args)`` to run after ``delay_ms`` milliseconds."""
        message = Message(
            due=self._clock() + max(0.0, delay_ms) / 1000.0,
            seq=next(self._seq),
            callback=callback,
            args=args,
            what=what,
        )
        with self._lock:
            heapq.heappush(self._queue, message)
        self._wakeup.set()
        return message

    def remove(self, what: Hashable) -> int:
        """Cancel every pending message tagged ``what``. Returns how many were removed."""
        with self._lock:
            removed = 0
            for message in self._queue:
                if message.what == what and not message.cancelled:
                    message.cancelled = True
                    removed += 1
            if removed:
                self._queue = [m for m in self._queue if not m.cancelled]
                heapq.heapify(self._queue)
        return removed

    def pending(self, what: Optional[Hashable] = None) -> int:
        """Number of queued messages, optionally only those tagged ``what``."""
        with self._lock:
            if what is None:
                return len(self._queue)
            return sum(1 for m in self._queue if m.what == what)

    def next_timeout(self) -> Optional[float]:
        """Seconds until the next message is due, or None if the queue is empty."""
        with self._lock:
            if not self._queue:
                return None
            return max(0.0, self._queue[0].due - self._clock())

    def run_pending(self) -> int:
        """
        Run every message that is due now.

        Messages posted by the callbacks themselves wait for the next pass.

        Returns:
            Number of callbacks run
        """
        ran = 0
        now = self._clock()
        with self._lock:
            batch = [m for m in self._queue if m.due <= now]
        for message in sorted(batch):
            with self._lock:
                if message.cancelled or message not in self._queue:
                    continue
                self._queue.remove(message)
                heapq.heapify(self._queue)
            message.callback(*message.args)
            ran += 1
        return ran

    def run(self) -> None:
        """Process messages until ``stop`` is called."""
        self.running = True
        while self.running:
            self._wakeup.clear()
            self.run_pending()
            if not self.running:
                break
            self._wakeup.wait(timeout=self.next_timeout())

    def stop(self) -> None:
        """Ask ``run`` to return. Safe to call from any thread."""
        self.running = False
        self._wakeup.set()

"""Second-aligned tick scheduling for interactive mode."""

import logging
import time
from dataclasses import dataclass
from typing import Callable

from .loop import MainLoop

logger = logging.getLogger(__name__)

# Interactive update rate; once a second to advance the hands
INTERACTIVE_UPDATE_RATE_MS = 1000

MSG_UPDATE_TIME = "update_time"


@dataclass(frozen=True)
class SchedulingState:
    """Inputs deciding whether the periodic tick runs."""

    is_visible: bool
    is_ambient: bool

    @property
    def should_run(self) -> bool:
        return self.is_visible and not self.is_ambient


def compute_next_delay(now_ms: int, interval_ms: int = INTERACTIVE_UPDATE_RATE_MS) -> int:
    """
    Milliseconds until the next whole-interval boundary.

    Aligning to the boundary keeps ticks close to the real second rollover.
    A time exactly on a boundary waits a full interval, never 0.
    """
    return interval_ms - (now_ms % interval_ms)


def wall_clock_ms() -> int:
    return int(time.time() * 1000)


class TickScheduler:
    """
    Keeps at most one pending wake on the main loop while it should run.

    Every wake carries the generation it was armed in. Cancelling or
    shutting down bumps the generation so a wake that still fires is
    dropped instead of touching a torn-down owner.
    """

    def __init__(
        self,
        loop: MainLoop,
        state_provider: Callable[[], SchedulingState],
        on_tick: Callable[[], None],
        interval_ms: int = INTERACTIVE_UPDATE_RATE_MS,
        now_ms: Callable[[], int] = wall_clock_ms,
    ):
        self._loop = loop
        self._state_provider = state_provider
        self._on_tick = on_tick
        self.interval_ms = interval_ms
        self._now_ms = now_ms
        self.generation = 0
        self._shut_down = False

    @property
    def pending(self) -> int:
        return self._loop.pending(MSG_UPDATE_TIME)

    def cancel(self) -> None:
        self._loop.remove(MSG_UPDATE_TIME)
        self.generation += 1

    def reevaluate(self, state: SchedulingState) -> bool:
        """
        Cancel any pending wake and arm a new one if ``state`` says to run.

        Returns:
            True if a wake is now pending
        """
        self.cancel()
        if self._shut_down or not state.should_run:
            return False
        self._loop.post(self._handle_wake, self.generation, what=MSG_UPDATE_TIME)
        return True

    def shutdown(self) -> None:
        self._shut_down = True
        self.cancel()

    def restart(self) -> None:
        """Accept wakes again after ``shutdown``. Nothing is armed until ``reevaluate``."""
        self.cancel()
        self._shut_down = False

    def _handle_wake(self, generation: int) -> None:
        if generation != self.generation or self._shut_down:
            logger.debug(f"Dropping stale wake from generation {generation}")
            return

        self._on_tick()

        # State may have changed since this wake was armed
        if not self._state_provider().should_run:
            logger.debug("Tick fired outside interactive mode, not re-arming")
            return

        delay_ms = compute_next_delay(self._now_ms(), self.interval_ms)
        self._loop.post_delayed(
            self._handle_wake, delay_ms, self.generation, what=MSG_UPDATE_TIME
        )

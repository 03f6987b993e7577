"""Detects changes of the host time zone."""

import logging
import threading
from typing import Callable, Optional

from .clock_state import system_zone_id

logger = logging.getLogger(__name__)


class TimeZoneWatcher:
    """
    Polls the system time zone and reports changes.

    The callback runs on the watcher thread; callers that own
    single-threaded state should forward it onto their main loop.
    """

    def __init__(
        self,
        poll_interval: float = 60.0,
        zone_source: Callable[[], str] = system_zone_id,
    ):
        """
        Initialize time zone watcher.

        Args:
            poll_interval: Seconds between checks
            zone_source: Returns the current IANA zone identifier
        """
        self.poll_interval = poll_interval
        self._zone_source = zone_source
        self._callback: Optional[Callable[[str], None]] = None
        self._last_zone: Optional[str] = None
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def registered(self) -> bool:
        return self._thread is not None

    def start(self, callback: Callable[[str], None]) -> bool:
        """
        Start watching.

        Returns:
            False if already running
        """
        if self._thread is not None:
            return False

        self._callback = callback
        self._last_zone = self._zone_source()
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()
        logger.debug(f"Time zone watcher started ({self._last_zone})")
        return True

    def stop(self) -> None:
        """Stop watching. No-op if not running."""
        if self._thread is None:
            return
        self._stop_event.set()
        self._thread.join(timeout=1.0)
        self._thread = None
        self._callback = None
        logger.debug("Time zone watcher stopped")

    def check(self) -> Optional[str]:
        """
        Compare the system zone against the last one seen.

        Returns:
            The new zone identifier if it changed, else None
        """
        zone = self._zone_source()
        if zone == self._last_zone:
            return None
        self._last_zone = zone
        if self._callback is not None:
            self._callback(zone)
        return zone

    def _run(self) -> None:
        while not self._stop_event.wait(self.poll_interval):
            try:
                self.check()
            except OSError as e:
                logger.warning(f"Time zone check failed: {e}")

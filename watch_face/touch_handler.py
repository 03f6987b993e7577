"""Touchscreen input producing tap commands."""

import logging
import threading
import time
from typing import TYPE_CHECKING, Callable, Optional

from .engine import TapType

if TYPE_CHECKING:
    from .config import TouchConfig

logger = logging.getLogger(__name__)

# Try to import evdev (only available on Linux)
try:
    from evdev import InputDevice, ecodes

    EVDEV_AVAILABLE = True
except ImportError:
    EVDEV_AVAILABLE = False
    logger.info("evdev not available - touch input disabled")

TapCallback = Callable[[TapType, int, int, float], None]


class TouchHandler:
    """
    Turns raw touchscreen events into TOUCH, TOUCH_CANCEL and TAP commands.

    A touch that moves further than ``tap_threshold`` pixels or lasts longer
    than ``tap_timeout`` seconds is reported as cancelled. The callback runs
    on the reader thread.
    """

    def __init__(
        self,
        config: "TouchConfig",
        on_tap: TapCallback,
        display_width: int = 320,
        display_height: int = 320,
    ):
        self.config = config
        self.on_tap = on_tap
        self.display_width = display_width
        self.display_height = display_height

        # Touch state
        self.touch_start_x: Optional[int] = None
        self.touch_start_y: Optional[int] = None
        self.touch_start_time: Optional[float] = None
        self.current_x: int = 0
        self.current_y: int = 0

        self._thread: Optional[threading.Thread] = None
        self._running = False
        self._device: Optional["InputDevice"] = None

        # Raw axis range of the controller
        self.raw_min = 0
        self.raw_max = 4095

    def start(self) -> bool:
        """
        Start the touch input thread.

        Returns:
            True if started successfully, False otherwise
        """
        if not EVDEV_AVAILABLE:
            logger.warning("Touch input not available (evdev not installed)")
            return False

        if not self.config.enabled:
            logger.info("Touch input disabled in config")
            return False

        try:
            self._device = InputDevice(self.config.device)
            logger.info(f"Touch device: {self._device.name}")
        except FileNotFoundError:
            logger.error(f"Touch device not found: {self.config.device}")
            return False
        except PermissionError:
            logger.error(
                f"Permission denied for {self.config.device}. "
                "Run as root or add user to 'input' group."
            )
            return False

        self._running = True
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()
        logger.info("Touch handler started")
        return True

    def stop(self) -> None:
        self._running = False
        if self._thread:
            self._thread.join(timeout=1.0)
            self._thread = None
        if self._device:
            self._device.close()
            self._device = None

    def _run(self) -> None:
        if self._device is None:
            return

        try:
            for event in self._device.read_loop():
                if not self._running:
                    break
                self._process_event(event)
        except OSError as e:
            if self._running:
                logger.error(f"Touch device error: {e}")

    def _process_event(self, event) -> None:
        if event.type == ecodes.EV_ABS:
            if event.code == ecodes.ABS_X:
                self.current_x = self._scale(event.value, self.display_width)
            elif event.code == ecodes.ABS_Y:
                self.current_y = self._scale(event.value, self.display_height)

        elif event.type == ecodes.EV_KEY and event.code == ecodes.BTN_TOUCH:
            if event.value == 1:
                self._on_touch_down()
            elif event.value == 0:
                self._on_touch_up()

    def _scale(self, raw_value: int, extent: int) -> int:
        normalized = (raw_value - self.raw_min) / (self.raw_max - self.raw_min)
        return int(normalized * extent)

    def _on_touch_down(self) -> None:
        self.touch_start_x = self.current_x
        self.touch_start_y = self.current_y
        self.touch_start_time = time.time()
        self.on_tap(TapType.TOUCH, self.current_x, self.current_y, self.touch_start_time)

    def _on_touch_up(self) -> None:
        if (
            self.touch_start_x is None
            or self.touch_start_y is None
            or self.touch_start_time is None
        ):
            return

        now = time.time()
        moved = max(
            abs(self.current_x - self.touch_start_x),
            abs(self.current_y - self.touch_start_y),
        )
        elapsed = now - self.touch_start_time

        if moved < self.config.tap_threshold and elapsed < self.config.tap_timeout:
            tap_type = TapType.TAP
        else:
            tap_type = TapType.TOUCH_CANCEL
        logger.debug(f"Touch up: moved={moved}, elapsed={elapsed:.2f}s -> {tap_type.value}")
        self.on_tap(tap_type, self.current_x, self.current_y, now)

        self.touch_start_x = None
        self.touch_start_y = None
        self.touch_start_time = None

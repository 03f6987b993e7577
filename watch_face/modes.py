"""Display modes and the controller that tracks them."""

import logging
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Mode(Enum):
    """Display mode a frame is rendered for."""

    INTERACTIVE = "interactive"
    AMBIENT = "ambient"
    AMBIENT_LOW_BIT = "ambient_low_bit"

    @property
    def is_ambient(self) -> bool:
        return self is not Mode.INTERACTIVE


def mode_for(ambient: bool, low_bit_ambient: bool) -> Mode:
    """
    Derive the display mode from the two host signals.

    Args:
        ambient: Whether the display is in its reduced-power state
        low_bit_ambient: Whether the display only supports reduced colour
            depth while ambient

    Returns:
        INTERACTIVE when not ambient, otherwise AMBIENT or AMBIENT_LOW_BIT
    """
    if not ambient:
        return Mode.INTERACTIVE
    if low_bit_ambient:
        return Mode.AMBIENT_LOW_BIT
    return Mode.AMBIENT


ModeListener = Callable[[Mode, Mode], None]


class DisplayModeController:
    """
    Tracks the ambient and low-bit signals and reports mode transitions.

    The controller owns no timers. When a signal changes the visible mode the
    listener is called once with ``(old_mode, new_mode)``; reports that leave
    the mode unchanged are ignored.
    """

    def __init__(self, on_mode_changed: Optional[ModeListener] = None):
        self.ambient = False
        self.low_bit_ambient = False
        self._mode = Mode.INTERACTIVE
        self._on_mode_changed = on_mode_changed

    @property
    def mode(self) -> Mode:
        return self._mode

    def on_capability_report(self, low_bit_ambient: bool) -> bool:
        """Record the low-bit capability. Returns True if the mode changed."""
        self.low_bit_ambient = bool(low_bit_ambient)
        return self._recompute()

    def on_ambient_changed(self, ambient: bool) -> bool:
        """Record entering or leaving ambient. Returns True if the mode changed."""
        self.ambient = bool(ambient)
        return self._recompute()

    def _recompute(self) -> bool:
        new_mode = mode_for(self.ambient, self.low_bit_ambient)
        if new_mode is self._mode:
            return False

        old_mode = self._mode
        self._mode = new_mode
        logger.debug(f"Display mode {old_mode.value} -> {new_mode.value}")
        if self._on_mode_changed is not None:
            self._on_mode_changed(old_mode, new_mode)
        return True

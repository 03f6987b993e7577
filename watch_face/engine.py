"""Watch face engine: host lifecycle callbacks wired to the rendering core."""

import logging
from enum import Enum
from typing import Callable, Optional

from .assets import AssetVariantTable
from .clock_state import ClockState, system_zone_id
from .loop import MainLoop
from .modes import DisplayModeController, Mode
from .renderer import Frame, RenderOptions, RenderPipeline
from .scheduler import INTERACTIVE_UPDATE_RATE_MS, SchedulingState, TickScheduler
from .timezone_watcher import TimeZoneWatcher

logger = logging.getLogger(__name__)

MSG_DRAW = "draw"


class TapType(Enum):
    """Stages of a tap gesture reported by the input layer."""

    TOUCH = "touch"
    TOUCH_CANCEL = "touch_cancel"
    TAP = "tap"


class WatchFaceEngine:
    """
    Receives host events and decides when and what to draw.

    All methods must be called on the main loop thread. Redraw requests
    are coalesced: any number of ``invalidate`` calls before the next draw
    result in a single frame.
    """

    def __init__(
        self,
        loop: MainLoop,
        assets: AssetVariantTable,
        frame_sink: Optional[Callable[[Frame], None]] = None,
        clock_state: Optional[ClockState] = None,
        options: Optional[RenderOptions] = None,
        zone_watcher: Optional[TimeZoneWatcher] = None,
        zone_source: Callable[[], str] = system_zone_id,
        interval_ms: int = INTERACTIVE_UPDATE_RATE_MS,
        max_frame_rate: float = 15.0,
    ):
        """
        Initialize the engine.

        Args:
            loop: Main loop all callbacks run on
            assets: Variant table, loaded in ``on_create``
            frame_sink: Receives every rendered frame
            clock_state: Clock to read; defaults to the system clock
            options: Initial render options
            zone_watcher: Source of zone change notifications while visible
            zone_source: Returns the system zone, read when becoming visible
            interval_ms: Interactive tick interval
            max_frame_rate: Upper bound on draws per second
        """
        self.loop = loop
        self.assets = assets
        self.clock_state = clock_state or ClockState(zone_source())
        self.mode_controller = DisplayModeController(self._on_mode_changed)
        self.pipeline = RenderPipeline(assets, self.invalidate, options)
        self.scheduler = TickScheduler(
            loop, self.scheduling_state, self.invalidate, interval_ms
        )
        self._frame_sink = frame_sink
        self._zone_watcher = zone_watcher
        self._zone_source = zone_source
        self.frame_interval = 1.0 / max_frame_rate

        self.created = False
        self.visible = False
        self.last_frame: Optional[Frame] = None
        self.draw_count = 0
        self._dirty = False
        self._last_draw: Optional[float] = None

    @property
    def mode(self) -> Mode:
        return self.mode_controller.mode

    @property
    def ambient(self) -> bool:
        return self.mode_controller.ambient

    def scheduling_state(self) -> SchedulingState:
        return SchedulingState(is_visible=self.visible, is_ambient=self.ambient)

    # Lifecycle

    def on_create(self) -> None:
        """
        Load every bitmap variant.

        Raises:
            AssetMissingError: If any element is incomplete; the face must
                not be activated in that case
        """
        if not self.assets.loaded:
            self.assets.load_all()
        self.scheduler.restart()
        self.created = True
        logger.info("Watch face created")

    def on_destroy(self) -> None:
        self.scheduler.shutdown()
        self.loop.remove(MSG_DRAW)
        self._dirty = False
        self._unregister_receiver()
        self.created = False
        logger.info("Watch face destroyed")

    def on_surface_changed(self, width: int, height: int) -> None:
        if self.pipeline.on_geometry_changed(width, height) is not None:
            self.invalidate()

    def on_visibility_changed(self, visible: bool) -> None:
        self.visible = visible
        if visible:
            self._register_receiver()
            # Zone may have changed while hidden
            self.clock_state.handle_zone_changed(self._zone_source())
            self.clock_state.refresh()
            self.invalidate()
        else:
            self._unregister_receiver()

        # Timer depends on visibility as well as ambient
        self._update_timer()

    def on_properties_changed(self, low_bit_ambient: bool) -> None:
        self.mode_controller.on_capability_report(low_bit_ambient)

    def on_ambient_mode_changed(self, ambient: bool) -> None:
        self.mode_controller.on_ambient_changed(ambient)

    def on_peek_card_position_changed(self, bounds: tuple[int, int, int, int]) -> None:
        self.pipeline.options.peek_card_bounds = tuple(bounds)
        if self.ambient:
            self.invalidate()

    def on_tap_command(self, tap_type: TapType, x: int, y: int, event_time: float) -> None:
        """Taps change no state yet but always redraw."""
        logger.debug(f"Tap {tap_type.value} at ({x}, {y})")
        self.invalidate()

    def on_time_tick(self) -> None:
        """Host minute tick, the only redraw source while ambient."""
        self.invalidate()

    def on_time_zone_changed(self, zone_id: str) -> None:
        self.clock_state.handle_zone_changed(zone_id)
        self.clock_state.refresh()
        self.invalidate()

    # Drawing

    def invalidate(self) -> None:
        """Request a redraw. Requests made before the draw runs collapse into one."""
        if self._dirty:
            return
        self._dirty = True

        delay_ms = 0.0
        if self._last_draw is not None:
            next_allowed = self._last_draw + self.frame_interval
            delay_ms = max(0.0, (next_allowed - self.loop.now()) * 1000)
        self.loop.post_delayed(self.draw, delay_ms, what=MSG_DRAW)

    def draw(self) -> Optional[Frame]:
        """Render a frame now and hand it to the sink."""
        self._dirty = False
        self.loop.remove(MSG_DRAW)
        geometry = self.pipeline.geometry
        if not self.created or geometry is None:
            logger.debug("Skipping draw: surface not ready")
            return None

        snapshot = self.clock_state.refresh()
        self._last_draw = self.loop.now()
        frame = self.pipeline.render_frame(
            self.mode, snapshot, geometry, visible=self.visible
        )
        self.last_frame = frame
        self.draw_count += 1

        if self._frame_sink is not None:
            self._frame_sink(frame)
        return frame

    # Internals

    def _on_mode_changed(self, old_mode: Mode, new_mode: Mode) -> None:
        # Low-bit panels get hard edges while ambient
        self.pipeline.options.anti_alias = new_mode is not Mode.AMBIENT_LOW_BIT
        logger.info(f"Mode changed: {old_mode.value} -> {new_mode.value}")
        self.invalidate()
        self._update_timer()

    def _update_timer(self) -> None:
        self.scheduler.reevaluate(self.scheduling_state())

    def _register_receiver(self) -> None:
        if self._zone_watcher is None or self._zone_watcher.registered:
            return
        self._zone_watcher.start(
            lambda zone_id: self.loop.post(self.on_time_zone_changed, zone_id)
        )

    def _unregister_receiver(self) -> None:
        if self._zone_watcher is None or not self._zone_watcher.registered:
            return
        self._zone_watcher.stop()

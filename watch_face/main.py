"""Main entry point for the watch face."""

import argparse
import logging
import signal
import sys
from pathlib import Path
from typing import Optional

from .assets import AssetVariantTable, directory_loader
from .assets_builder import generate_assets
from .clock_state import ClockState, system_zone_id
from .config import Config, load_config
from .display import Display
from .engine import TapType, WatchFaceEngine
from .errors import AssetMissingError
from .loop import MainLoop
from .renderer import RenderOptions
from .scheduler import compute_next_delay, wall_clock_ms
from .timezone_watcher import TimeZoneWatcher
from .touch_handler import TouchHandler

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout),
    ],
)

logger = logging.getLogger(__name__)

MSG_TIME_TICK = "time_tick"
MSG_AMBIENT_TIMEOUT = "ambient_timeout"
MINUTE_MS = 60_000


class WatchFaceApp:
    """
    Hosts the watch face engine on a framebuffer panel.

    Plays the part of the platform: reports the surface, capabilities and
    visibility, sends minute ticks, and enters ambient mode after a period
    without touches.
    """

    def __init__(self, config: Config):
        """
        Initialize the application.

        Args:
            config: Application configuration
        """
        self.config = config
        self.loop = MainLoop()

        timing = config.timing
        self.display = Display(config.display)
        self.assets = AssetVariantTable(directory_loader(Path(config.assets.directory)))
        self.zone_watcher = TimeZoneWatcher(poll_interval=timing.zone_poll_seconds)
        self.engine = WatchFaceEngine(
            loop=self.loop,
            assets=self.assets,
            frame_sink=self.display.show,
            clock_state=ClockState(self.zone_id()),
            options=RenderOptions(
                peek_card_bounds=tuple(config.appearance.peek_card_bounds),
                face_offset=config.appearance.face_offset,
            ),
            zone_watcher=None if timing.timezone else self.zone_watcher,
            zone_source=self.zone_id,
            interval_ms=timing.interactive_update_ms,
            max_frame_rate=config.display.max_frame_rate,
        )
        self.touch_handler = TouchHandler(
            config=config.touch,
            on_tap=self._on_touch,
            display_width=config.display.width,
            display_height=config.display.height,
        )

    def zone_id(self) -> str:
        """Configured zone, or the system zone when none is configured."""
        return self.config.timing.timezone or system_zone_id()

    def start_engine(self, ambient: bool = False) -> None:
        """
        Bring the engine up to a visible, drawable state.

        Raises:
            AssetMissingError: If the asset set is incomplete
        """
        self.engine.on_create()
        self.engine.on_properties_changed(self.config.device.low_bit_ambient)
        self.engine.on_surface_changed(self.config.display.width, self.config.display.height)
        self.engine.on_ambient_mode_changed(ambient)
        self.engine.on_visibility_changed(True)

    def snapshot(self, path: Path, ambient: bool = False) -> bool:
        """Render a single frame to an image file without touching the display."""
        try:
            self.engine.on_create()
        except AssetMissingError as e:
            logger.error(f"Cannot render snapshot: {e}")
            return False
        self.engine.on_properties_changed(self.config.device.low_bit_ambient)
        self.engine.on_surface_changed(self.config.display.width, self.config.display.height)
        self.engine.on_ambient_mode_changed(ambient)

        frame = self.engine.draw()
        if frame is None:
            logger.error("Nothing to render")
            return False
        frame.image.save(path)
        logger.info(f"Saved {frame.mode.value} frame to {path}")
        return True

    def run(self) -> int:
        """Run until SIGINT/SIGTERM. Returns a process exit code."""
        logger.info("Starting watch face...")

        try:
            self.engine.on_create()
        except AssetMissingError as e:
            logger.error(f"Watch face not activated: {e}")
            return 1

        if not self.display.open():
            logger.error("Failed to open display")
            return 1

        self.touch_handler.start()

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        self.start_engine()
        self._schedule_time_tick()
        self._schedule_ambient_timeout()

        logger.info("Watch face running. Press Ctrl+C to stop.")
        try:
            self.loop.run()
        finally:
            self._cleanup()
        return 0

    def _signal_handler(self, signum, frame) -> None:
        logger.info(f"Received signal {signum}, shutting down...")
        self.loop.stop()

    def _on_touch(self, tap_type: TapType, x: int, y: int, event_time: float) -> None:
        # Called on the touch thread
        self.loop.post(self._handle_touch, tap_type, x, y, event_time)

    def _handle_touch(self, tap_type: TapType, x: int, y: int, event_time: float) -> None:
        if tap_type is TapType.TAP and self.engine.ambient:
            self.engine.on_ambient_mode_changed(False)
        self.engine.on_tap_command(tap_type, x, y, event_time)
        self._schedule_ambient_timeout()

    def _schedule_time_tick(self) -> None:
        delay_ms = compute_next_delay(wall_clock_ms(), MINUTE_MS)
        self.loop.post_delayed(self._time_tick, delay_ms, what=MSG_TIME_TICK)

    def _time_tick(self) -> None:
        self.engine.on_time_tick()
        self._schedule_time_tick()

    def _schedule_ambient_timeout(self) -> None:
        self.loop.remove(MSG_AMBIENT_TIMEOUT)
        timeout = self.config.timing.ambient_timeout_seconds
        if timeout > 0:
            self.loop.post_delayed(
                self._enter_ambient, timeout * 1000, what=MSG_AMBIENT_TIMEOUT
            )

    def _enter_ambient(self) -> None:
        logger.debug("Idle timeout, entering ambient mode")
        self.engine.on_ambient_mode_changed(True)

    def _cleanup(self) -> None:
        logger.info("Cleaning up...")
        self.touch_handler.stop()
        self.engine.on_visibility_changed(False)
        self.engine.on_destroy()
        self.display.clear()
        self.display.close()
        logger.info("Cleanup complete")


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Analog watch face with interactive and ambient modes"
    )
    parser.add_argument("-c", "--config", type=Path, help="Path to config.json file")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--snapshot", type=Path, metavar="PATH", help="Render one frame to PATH and exit"
    )
    parser.add_argument(
        "--ambient", action="store_true", help="Render the snapshot in ambient mode"
    )
    parser.add_argument(
        "--generate-assets",
        type=Path,
        metavar="DIR",
        help="Write the default bitmap variants to DIR and exit",
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.generate_assets:
        generate_assets(args.generate_assets)
        return 0

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        logger.error(f"Config file not found: {e}")
        return 1
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    app = WatchFaceApp(config)

    if args.snapshot:
        return 0 if app.snapshot(args.snapshot, ambient=args.ambient) else 1

    return app.run()


if __name__ == "__main__":
    sys.exit(main())

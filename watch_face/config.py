"""Configuration loading and validation for the watch face."""

import dataclasses
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# Default paths to search for config
CONFIG_PATHS = [
    Path("config.json"),
    Path.home() / ".config" / "watch-face" / "config.json",
    Path("/etc/watch-face/config.json"),
]


@dataclass
class DisplayConfig:
    """Display settings."""

    width: int = 320
    height: int = 320
    framebuffer: str = "/dev/fb1"
    max_frame_rate: float = 15.0

    def validate(self) -> list[str]:
        errors = []
        if self.width <= 0 or self.height <= 0:
            errors.append(f"Invalid display dimensions: {self.width}x{self.height}")
        if self.max_frame_rate <= 0:
            errors.append(f"Invalid max_frame_rate {self.max_frame_rate}: must be positive")
        return errors


@dataclass
class AssetsConfig:
    """Where the bitmap variants are loaded from."""

    directory: str = "assets"

    def validate(self) -> list[str]:
        errors = []
        if not self.directory:
            errors.append("Asset directory must not be empty")
        return errors


@dataclass
class AppearanceConfig:
    """Appearance settings."""

    # Nudge applied to the face on both axes, in native (unscaled) pixels
    face_offset: float = 1.0
    # (left, top, right, bottom) masked in ambient mode; all zero disables it
    peek_card_bounds: list[int] = field(default_factory=lambda: [0, 0, 0, 0])

    def validate(self) -> list[str]:
        errors = []
        if len(self.peek_card_bounds) != 4:
            errors.append(
                f"Invalid peek_card_bounds {self.peek_card_bounds}: "
                "must be [left, top, right, bottom]"
            )
        return errors


@dataclass
class TimingConfig:
    """Tick, ambient and time zone settings."""

    interactive_update_ms: int = 1000
    ambient_timeout_seconds: float = 30.0  # 0 disables automatic ambient
    timezone: str = ""  # empty follows the system zone
    zone_poll_seconds: float = 60.0

    def validate(self) -> list[str]:
        errors = []
        if self.interactive_update_ms <= 0:
            errors.append("Interactive update interval must be positive")
        if self.ambient_timeout_seconds < 0:
            errors.append("Ambient timeout must not be negative")
        if self.zone_poll_seconds <= 0:
            errors.append("Zone poll interval must be positive")
        if self.timezone:
            from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

            try:
                ZoneInfo(self.timezone)
            except (ZoneInfoNotFoundError, ValueError):
                errors.append(f"Unknown timezone '{self.timezone}'")
        return errors


@dataclass
class DeviceConfig:
    """Capabilities reported for the panel."""

    low_bit_ambient: bool = False

    def validate(self) -> list[str]:
        return []


@dataclass
class TouchConfig:
    """Touchscreen settings."""

    enabled: bool = True
    device: str = "/dev/input/event0"
    tap_threshold: int = 30
    tap_timeout: float = 0.4

    def validate(self) -> list[str]:
        errors = []
        if self.tap_threshold <= 0:
            errors.append("Tap threshold must be positive")
        if self.tap_timeout <= 0:
            errors.append("Tap timeout must be positive")
        return errors


@dataclass
class Config:
    """Main configuration container."""

    display: DisplayConfig = field(default_factory=DisplayConfig)
    assets: AssetsConfig = field(default_factory=AssetsConfig)
    appearance: AppearanceConfig = field(default_factory=AppearanceConfig)
    timing: TimingConfig = field(default_factory=TimingConfig)
    device: DeviceConfig = field(default_factory=DeviceConfig)
    touch: TouchConfig = field(default_factory=TouchConfig)

    def validate(self) -> list[str]:
        """Validate all configuration sections. Returns list of errors."""
        errors = []
        errors.extend(self.display.validate())
        errors.extend(self.assets.validate())
        errors.extend(self.appearance.validate())
        errors.extend(self.timing.validate())
        errors.extend(self.device.validate())
        errors.extend(self.touch.validate())
        return errors


def _dataclass_from_dict(cls, data: dict):
    """Create a dataclass instance from a dict, using field defaults for missing keys."""
    kwargs = {}
    for f in dataclasses.fields(cls):
        if f.name in data:
            kwargs[f.name] = data[f.name]
    return cls(**kwargs)


# Mapping from config JSON keys to their dataclass types
_CONFIG_SECTIONS = {
    "display": DisplayConfig,
    "assets": AssetsConfig,
    "appearance": AppearanceConfig,
    "timing": TimingConfig,
    "device": DeviceConfig,
    "touch": TouchConfig,
}


def _dict_to_config(data: dict) -> Config:
    """Convert a dictionary to a Config object."""
    config = Config()
    for key, cls in _CONFIG_SECTIONS.items():
        if key in data:
            setattr(config, key, _dataclass_from_dict(cls, data[key]))
    return config


def load_config(config_path: Optional[Path] = None) -> Config:
    """
    Load configuration from JSON file.

    Args:
        config_path: Explicit path to config file. If None, searches default paths.

    Returns:
        Config object with loaded settings.

    Raises:
        FileNotFoundError: If no config file found and config_path was explicit.
        ValueError: If config file has validation errors.
    """
    paths_to_try = [config_path] if config_path is not None else CONFIG_PATHS

    found_path = next((path for path in paths_to_try if path.exists()), None)

    if found_path is None:
        if config_path is not None:
            raise FileNotFoundError(f"Config file not found: {config_path}")
        logger.warning("No config file found, using defaults")
        return Config()

    logger.info(f"Loading config from {found_path}")
    try:
        with open(found_path, "r") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file {found_path}: {e}")

    config = _dict_to_config(data)

    errors = config.validate()
    if errors:
        error_msg = "Config validation errors:\n" + "\n".join(
            f"  - {e}" for e in errors
        )
        raise ValueError(error_msg)

    return config

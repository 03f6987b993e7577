"""Pytest fixtures for watch face tests."""

import json
import sys
from pathlib import Path

import pytest
from PIL import Image

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from watch_face.assets import AssetVariantTable, VisualElement  # noqa: E402
from watch_face.clock_state import ClockState  # noqa: E402
from watch_face.loop import MainLoop  # noqa: E402
from watch_face.modes import Mode  # noqa: E402

# Native sizes used by the synthetic asset set
ELEMENT_SIZES = {
    VisualElement.BACKGROUND: (200, 200),
    VisualElement.FACE: (20, 20),
    VisualElement.HOUR_HAND: (10, 60),
    VisualElement.MINUTE_HAND: (8, 80),
}

BACKGROUND_COLORS = {
    Mode.INTERACTIVE: (200, 30, 30, 255),
    Mode.AMBIENT: (30, 200, 30, 255),
    Mode.AMBIENT_LOW_BIT: (30, 30, 200, 255),
}

ELEMENT_COLORS = {
    VisualElement.FACE: (255, 0, 255, 255),
    VisualElement.HOUR_HAND: (0, 255, 255, 255),
    VisualElement.MINUTE_HAND: (255, 255, 0, 255),
}

# 2023-11-14 22:13:20 UTC
FIXED_EPOCH = 1700000000.0


def make_loader(missing=()):
    """Loader producing solid-colour bitmaps, returning None for ``missing`` pairs."""

    def _load(element, mode):
        if (element, mode) in missing:
            return None
        if element is VisualElement.BACKGROUND:
            color = BACKGROUND_COLORS[mode]
        else:
            color = ELEMENT_COLORS[element]
        return Image.new("RGBA", ELEMENT_SIZES[element], color)

    return _load


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def loop(fake_clock):
    """Main loop driven by the fake clock."""
    return MainLoop(clock=fake_clock)


@pytest.fixture
def asset_table():
    """Fully loaded asset table at native size."""
    table = AssetVariantTable(make_loader())
    table.load_all()
    return table


@pytest.fixture
def clock_state():
    """Clock pinned to FIXED_EPOCH in UTC."""
    return ClockState("UTC", time_source=lambda: FIXED_EPOCH)


@pytest.fixture
def sample_config_dict():
    """Sample configuration dictionary."""
    return {
        "display": {
            "width": 400,
            "height": 400,
            "framebuffer": "/dev/fb1",
            "max_frame_rate": 10,
        },
        "assets": {"directory": "assets"},
        "appearance": {
            "face_offset": 1.0,
            "peek_card_bounds": [0, 300, 400, 400],
        },
        "timing": {
            "interactive_update_ms": 1000,
            "ambient_timeout_seconds": 30,
            "timezone": "America/New_York",
            "zone_poll_seconds": 60,
        },
        "device": {"low_bit_ambient": True},
        "touch": {
            "enabled": True,
            "device": "/dev/input/event0",
            "tap_threshold": 30,
            "tap_timeout": 0.4,
        },
    }


@pytest.fixture
def temp_config_file(tmp_path, sample_config_dict):
    """Create a temporary config file."""
    config_path = tmp_path / "config.json"
    with open(config_path, "w") as f:
        json.dump(sample_config_dict, f)
    return config_path


@pytest.fixture
def sample_config(sample_config_dict):
    """Create a Config object from sample data."""
    from watch_face.config import _dict_to_config

    return _dict_to_config(sample_config_dict)

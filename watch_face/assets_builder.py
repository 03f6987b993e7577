"""Generates a default set of bitmap variants for the face."""

import logging
import math
from dataclasses import dataclass
from pathlib import Path

from PIL import Image, ImageDraw

from .assets import MODE_ORDER, VisualElement, asset_filename
from .modes import Mode

logger = logging.getLogger(__name__)

# Native size of the background; everything is scaled from this at runtime
NATIVE_SIZE = 160

TRANSPARENT = (0, 0, 0, 0)


@dataclass(frozen=True)
class Palette:
    """Colours for one display mode."""

    surround: tuple[int, int, int, int]
    dial: tuple[int, int, int, int]
    markers: tuple[int, int, int, int]
    minor_markers: tuple[int, int, int, int]
    hands: tuple[int, int, int, int]
    accent: tuple[int, int, int, int]


PALETTES = {
    Mode.INTERACTIVE: Palette(
        surround=(25, 25, 112, 255),
        dial=(240, 240, 230, 255),
        markers=(50, 50, 50, 255),
        minor_markers=(100, 100, 100, 255),
        hands=(0, 0, 0, 255),
        accent=(200, 0, 0, 255),
    ),
    Mode.AMBIENT: Palette(
        surround=(0, 0, 0, 255),
        dial=(20, 20, 20, 255),
        markers=(128, 128, 128, 255),
        minor_markers=(60, 60, 60, 255),
        hands=(180, 180, 180, 255),
        accent=(180, 180, 180, 255),
    ),
    # Low-bit panels: pure black and white only
    Mode.AMBIENT_LOW_BIT: Palette(
        surround=(0, 0, 0, 255),
        dial=(0, 0, 0, 255),
        markers=(255, 255, 255, 255),
        minor_markers=TRANSPARENT,
        hands=(255, 255, 255, 255),
        accent=(255, 255, 255, 255),
    ),
}


def render_background(mode: Mode, size: int = NATIVE_SIZE) -> Image.Image:
    """Opaque dial disc on the surround colour."""
    palette = PALETTES[mode]
    image = Image.new("RGBA", (size, size), palette.surround)
    draw = ImageDraw.Draw(image)
    margin = size // 32
    draw.ellipse([(margin, margin), (size - margin - 1, size - margin - 1)], fill=palette.dial)
    return image


def render_face(mode: Mode, size: int = NATIVE_SIZE) -> Image.Image:
    """Hour and minute markers plus the centre cap, transparent elsewhere."""
    palette = PALETTES[mode]
    image = Image.new("RGBA", (size, size), TRANSPARENT)
    draw = ImageDraw.Draw(image)
    center = size / 2
    radius = size / 2 - size // 16

    # Hour markers, thicker for 12, 3, 6, 9
    for hour in range(12):
        angle = math.radians(hour * 30 - 90)
        inner_r = radius - size * 0.09
        x1 = center + inner_r * math.cos(angle)
        y1 = center + inner_r * math.sin(angle)
        x2 = center + radius * math.cos(angle)
        y2 = center + radius * math.sin(angle)
        width = max(1, size // 53) if hour % 3 == 0 else max(1, size // 160)
        draw.line([(x1, y1), (x2, y2)], fill=palette.markers, width=width)

    # Minute markers, skipped on low-bit panels
    if palette.minor_markers != TRANSPARENT:
        for minute in range(60):
            if minute % 5 == 0:
                continue
            angle = math.radians(minute * 6 - 90)
            inner_r = radius - size * 0.03
            x1 = center + inner_r * math.cos(angle)
            y1 = center + inner_r * math.sin(angle)
            x2 = center + radius * math.cos(angle)
            y2 = center + radius * math.sin(angle)
            draw.line([(x1, y1), (x2, y2)], fill=palette.minor_markers, width=1)

    cap = size * 0.04
    draw.ellipse(
        [(center - cap, center - cap), (center + cap, center + cap)], fill=palette.hands
    )
    dot = cap / 2
    draw.ellipse(
        [(center - dot, center - dot), (center + dot, center + dot)], fill=palette.accent
    )
    return image


def render_hand(mode: Mode, length: int, width: int) -> Image.Image:
    """
    Hand pointing at 12 o'clock.

    The pivot is the bottom-centre of the bitmap.
    """
    palette = PALETTES[mode]
    image = Image.new("RGBA", (width, length), TRANSPARENT)
    draw = ImageDraw.Draw(image)
    draw.rectangle([(0, width // 2), (width - 1, length - 1)], fill=palette.hands)
    draw.ellipse([(0, 0), (width - 1, width - 1)], fill=palette.hands)
    return image


def render_variant(element: VisualElement, mode: Mode, size: int = NATIVE_SIZE) -> Image.Image:
    """Render one variant of one element."""
    if element is VisualElement.BACKGROUND:
        return render_background(mode, size)
    if element is VisualElement.FACE:
        return render_face(mode, size)
    if element is VisualElement.HOUR_HAND:
        return render_hand(mode, length=int(size * 0.26), width=max(2, size // 27))
    return render_hand(mode, length=int(size * 0.40), width=max(2, size // 40))


def generate_assets(directory: Path, size: int = NATIVE_SIZE) -> list[Path]:
    """
    Write all twelve variants as PNG files.

    Args:
        directory: Target directory, created if missing
        size: Native background width and height

    Returns:
        Paths written
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    written = []
    for element in VisualElement:
        for mode in MODE_ORDER:
            path = directory / asset_filename(element, mode)
            render_variant(element, mode, size).save(path)
            written.append(path)

    logger.info(f"Wrote {len(written)} assets to {directory}")
    return written

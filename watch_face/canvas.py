"""Pillow drawing surface with a rotation stack."""

import math
from typing import Optional

from PIL import Image, ImageDraw

Color = tuple[int, int, int]


class Canvas:
    """
    RGBA drawing surface that supports rotating about a pivot point.

    Bitmaps drawn while a rotation is active are placed as if the whole
    canvas had been turned clockwise by ``rotation`` degrees about the pivot,
    then composited upright onto the surface.
    """

    def __init__(self, width: int, height: int, color: Color = (0, 0, 0)):
        self.image = Image.new("RGBA", (width, height), color + (255,))
        self._draw = ImageDraw.Draw(self.image)
        self.rotation = 0.0
        self.pivot = (width / 2, height / 2)
        self._stack: list[tuple[float, tuple[float, float]]] = []
        self.resample = Image.Resampling.BICUBIC

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    def fill_rect(self, bounds: tuple[int, int, int, int], color: Color) -> None:
        """Fill ``(left, top, right, bottom)`` with an opaque colour."""
        left, top, right, bottom = bounds
        if right <= left or bottom <= top:
            return
        self._draw.rectangle([(left, top), (right - 1, bottom - 1)], fill=color + (255,))

    def save(self) -> None:
        self._stack.append((self.rotation, self.pivot))

    def restore(self) -> None:
        self.rotation, self.pivot = self._stack.pop()

    def rotate(self, degrees: float, px: float, py: float) -> None:
        """
        Add a clockwise rotation about ``(px, py)``.

        Successive rotations share one pivot.
        """
        self.rotation = (self.rotation + degrees) % 360
        self.pivot = (px, py)

    def draw_bitmap(
        self, bitmap: Image.Image, x: float, y: float, resample: Optional[int] = None
    ) -> None:
        """Composite ``bitmap`` with its top-left corner at ``(x, y)`` in rotated space."""
        if bitmap.mode != "RGBA":
            bitmap = bitmap.convert("RGBA")

        if self.rotation == 0:
            self._composite_clipped(bitmap, round(x), round(y))
            return

        px, py = self.pivot
        # Square layer centred on the pivot, large enough for any rotation
        corners = [
            (x - px, y - py),
            (x + bitmap.width - px, y - py),
            (x - px, y + bitmap.height - py),
            (x + bitmap.width - px, y + bitmap.height - py),
        ]
        half = math.ceil(max(math.hypot(dx, dy) for dx, dy in corners))
        layer = Image.new("RGBA", (2 * half, 2 * half), (0, 0, 0, 0))
        layer.alpha_composite(bitmap, (round(x - px + half), round(y - py + half)))

        # PIL rotates counter-clockwise
        layer = layer.rotate(
            -self.rotation,
            resample=self.resample if resample is None else resample,
            center=(half, half),
        )
        self._composite_clipped(layer, round(px - half), round(py - half))

    def _composite_clipped(self, layer: Image.Image, left: int, top: int) -> None:
        # alpha_composite rejects negative destinations, so crop the layer first
        src_left = max(0, -left)
        src_top = max(0, -top)
        src_right = min(layer.width, self.width - left)
        src_bottom = min(layer.height, self.height - top)
        if src_right <= src_left or src_bottom <= src_top:
            return
        self.image.alpha_composite(
            layer,
            dest=(left + src_left, top + src_top),
            source=(src_left, src_top, src_right, src_bottom),
        )

    def to_rgb(self) -> Image.Image:
        return self.image.convert("RGB")

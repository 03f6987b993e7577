"""Frame compositing for the analog face."""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from PIL import Image

from .assets import AssetVariantTable, VisualElement
from .canvas import Canvas
from .clock_state import ClockSnapshot
from .errors import InvalidGeometryError
from .modes import Mode

logger = logging.getLogger(__name__)

# Opaque fill under everything so no previous frame shows through
AMBIENT_BACKGROUND = (0, 0, 0)


@dataclass(frozen=True)
class Geometry:
    """Surface size and the values derived from it."""

    surface_width: int
    surface_height: int
    scale_factor: float
    center_x: float
    center_y: float

    @classmethod
    def from_surface(cls, width: int, height: int, native_width: int) -> "Geometry":
        """
        Compute geometry for a surface.

        The centre ignores any insets so that the face stays centred on the
        full panel.

        Raises:
            InvalidGeometryError: If width or height is not positive
        """
        if width <= 0 or height <= 0:
            raise InvalidGeometryError(f"Invalid surface size {width}x{height}")
        if native_width <= 0:
            raise InvalidGeometryError(f"Invalid native background width {native_width}")
        return cls(
            surface_width=width,
            surface_height=height,
            scale_factor=width / native_width,
            center_x=width / 2,
            center_y=height / 2,
        )


@dataclass
class RenderOptions:
    """Drawing settings, set at startup and changed only on mode transitions."""

    anti_alias: bool = True
    peek_card_bounds: tuple[int, int, int, int] = (0, 0, 0, 0)
    face_offset: float = 1.0

    @property
    def resample(self) -> int:
        if self.anti_alias:
            return Image.Resampling.BICUBIC
        return Image.Resampling.NEAREST


@dataclass
class Frame:
    """A composited frame and the hand rotations it was drawn with."""

    image: Image.Image
    mode: Mode
    snapshot: ClockSnapshot
    minute_rotation: float
    hour_rotation: float
    face_position: tuple[float, float] = field(default=(0.0, 0.0))


class RenderPipeline:
    """
    Composites background, hands and face into frames.

    Owns the surface geometry and the once-per-resize rescale of the
    asset table. ``request_redraw`` is called after an interactive frame
    while visible so that the face keeps animating.
    """

    def __init__(
        self,
        assets: AssetVariantTable,
        request_redraw: Optional[Callable[[], None]] = None,
        options: Optional[RenderOptions] = None,
    ):
        self.assets = assets
        self.options = options or RenderOptions()
        self.geometry: Optional[Geometry] = None
        self._request_redraw = request_redraw

    def on_geometry_changed(self, width: int, height: int) -> Optional[Geometry]:
        """
        Recompute geometry and rescale all bitmaps for a new surface size.

        A non-positive size is ignored and the previous geometry kept.

        Returns:
            The current geometry (possibly unchanged, possibly None)
        """
        native_width, _ = self.assets.native_size(
            VisualElement.BACKGROUND, Mode.INTERACTIVE
        )
        try:
            geometry = Geometry.from_surface(width, height, native_width)
        except InvalidGeometryError as e:
            logger.debug(f"Ignoring surface change: {e}")
            return self.geometry

        if geometry == self.geometry:
            return self.geometry

        self.geometry = geometry
        self.assets.rescale(geometry.scale_factor)
        logger.info(
            f"Surface {width}x{height}, scale factor {geometry.scale_factor:.3f}"
        )
        return geometry

    def render_frame(
        self,
        mode: Mode,
        snapshot: ClockSnapshot,
        geometry: Geometry,
        visible: bool = True,
    ) -> Frame:
        """
        Draw one frame.

        Args:
            mode: Display mode selecting the bitmap variants
            snapshot: Time to show
            geometry: Surface geometry
            visible: Whether the surface is currently shown

        Returns:
            The composited frame
        """
        opts = self.options
        cx, cy = geometry.center_x, geometry.center_y
        canvas = Canvas(
            geometry.surface_width, geometry.surface_height, AMBIENT_BACKGROUND
        )
        canvas.resample = opts.resample

        canvas.draw_bitmap(self.assets.select(VisualElement.BACKGROUND, mode), 0, 0)

        if mode.is_ambient:
            # Mask the peek card area so a stale card never bleeds through
            canvas.fill_rect(opts.peek_card_bounds, AMBIENT_BACKGROUND)

        minute_deg = snapshot.minute_angle
        hour_deg = snapshot.hour_angle

        canvas.save()

        canvas.rotate(minute_deg, cx, cy)
        minute_rotation = canvas.rotation
        minute_hand = self.assets.select(VisualElement.MINUTE_HAND, mode)
        canvas.draw_bitmap(
            minute_hand, cx - minute_hand.width / 2, cy - minute_hand.height
        )

        # Back to 12 o'clock, then on to the hour angle
        canvas.rotate(360 - minute_deg + hour_deg, cx, cy)
        hour_rotation = canvas.rotation
        hour_hand = self.assets.select(VisualElement.HOUR_HAND, mode)
        canvas.draw_bitmap(hour_hand, cx - hour_hand.width / 2, cy - hour_hand.height)

        canvas.restore()

        # Face goes last so the hands never cover it
        face = self.assets.select(VisualElement.FACE, mode)
        offset = opts.face_offset * geometry.scale_factor
        face_x = cx - face.width // 2 + offset
        face_y = cy - face.height // 2 + offset
        canvas.draw_bitmap(face, face_x, face_y)

        frame = Frame(
            image=canvas.to_rgb(),
            mode=mode,
            snapshot=snapshot,
            minute_rotation=minute_rotation,
            hour_rotation=hour_rotation,
            face_position=(face_x, face_y),
        )

        if visible and not mode.is_ambient and self._request_redraw is not None:
            self._request_redraw()

        return frame

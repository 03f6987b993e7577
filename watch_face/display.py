"""Framebuffer surface the watch face draws to."""

import logging
from typing import TYPE_CHECKING, Optional, BinaryIO

import numpy as np
from PIL import Image

if TYPE_CHECKING:
    from .config import DisplayConfig
    from .renderer import Frame

logger = logging.getLogger(__name__)


class Display:
    """Writes composited frames to a Linux framebuffer as RGB565."""

    def __init__(self, config: "DisplayConfig"):
        self.width = config.width
        self.height = config.height
        self.framebuffer = config.framebuffer
        self._fb_handle: Optional[BinaryIO] = None
        self.frames_written = 0

    @property
    def is_open(self) -> bool:
        return self._fb_handle is not None

    def open(self) -> bool:
        """
        Open the framebuffer device.

        Returns:
            True if successful, False otherwise
        """
        try:
            self._fb_handle = open(self.framebuffer, "wb")
            logger.info(f"Opened framebuffer: {self.framebuffer}")
            return True
        except PermissionError:
            logger.error(
                f"Permission denied opening {self.framebuffer}. "
                "Run as root or add user to 'video' group."
            )
            return False
        except FileNotFoundError:
            logger.error(f"Framebuffer not found: {self.framebuffer}")
            return False
        except OSError as e:
            logger.error(f"Failed to open framebuffer: {e}")
            return False

    def close(self) -> None:
        if self._fb_handle:
            try:
                self._fb_handle.close()
            except OSError as e:
                logger.warning(f"Error closing framebuffer: {e}")
            finally:
                self._fb_handle = None

    def show(self, frame: "Frame") -> bool:
        """Frame sink for the engine."""
        return self.write_image(frame.image)

    def write_image(self, image: Image.Image) -> bool:
        """
        Write an image to the framebuffer.

        Frames are rendered at the surface size already; anything else is
        a configuration mismatch and is resized with a warning.

        Returns:
            True if successful, False otherwise
        """
        if self._fb_handle is None:
            logger.error("Framebuffer not open")
            return False

        if image.size != (self.width, self.height):
            logger.warning(
                f"Frame size {image.size[0]}x{image.size[1]} does not match "
                f"display {self.width}x{self.height}"
            )
            image = image.resize((self.width, self.height), Image.Resampling.LANCZOS)

        if image.mode != "RGB":
            image = image.convert("RGB")

        try:
            self._fb_handle.seek(0)
            self._fb_handle.write(rgb_to_rgb565(image))
            self._fb_handle.flush()
        except OSError as e:
            logger.error(f"Failed to write to framebuffer: {e}")
            return False

        self.frames_written += 1
        return True

    def clear(self, color: tuple[int, int, int] = (0, 0, 0)) -> bool:
        return self.write_image(Image.new("RGB", (self.width, self.height), color))

    def __enter__(self) -> "Display":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def rgb_to_rgb565(image: Image.Image) -> bytes:
    """
    Pack an RGB image as little-endian RGB565 (5 bits red, 6 green, 5 blue).
    """
    arr = np.asarray(image, dtype=np.uint16)
    r = arr[:, :, 0]
    g = arr[:, :, 1]
    b = arr[:, :, 2]
    rgb565 = ((r >> 3) << 11) | ((g >> 2) << 5) | (b >> 3)
    return rgb565.astype("<u2").tobytes()

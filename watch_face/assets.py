"""Pre-rendered bitmap variants for each visual element of the face."""

import logging
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from PIL import Image

from .errors import AssetMissingError
from .modes import Mode

logger = logging.getLogger(__name__)


class VisualElement(Enum):
    """Layers composited into every frame."""

    BACKGROUND = "background"
    FACE = "face"
    HOUR_HAND = "hour_hand"
    MINUTE_HAND = "minute_hand"


# Variant order within each element's list
MODE_ORDER = (Mode.INTERACTIVE, Mode.AMBIENT, Mode.AMBIENT_LOW_BIT)

BitmapLoader = Callable[[VisualElement, Mode], Optional[Image.Image]]


def asset_filename(element: VisualElement, mode: Mode) -> str:
    """File name of one variant inside an asset directory."""
    return f"{element.value}_{mode.value}.png"


def load_native_bitmap(path: Path) -> Image.Image:
    """
    Decode a bitmap from disk at its native size.

    Args:
        path: Image file path

    Returns:
        RGBA image with its pixel data loaded

    Raises:
        FileNotFoundError: If the file does not exist
        OSError: If the file cannot be decoded
    """
    with Image.open(path) as image:
        image.load()
        return image.convert("RGBA")


def directory_loader(directory: Path) -> BitmapLoader:
    """Build a loader resolving ``<directory>/<element>_<mode>.png``."""
    directory = Path(directory)

    def _load(element: VisualElement, mode: Mode) -> Optional[Image.Image]:
        path = directory / asset_filename(element, mode)
        try:
            return load_native_bitmap(path)
        except FileNotFoundError:
            logger.error(f"Asset not found: {path}")
        except OSError as e:
            logger.error(f"Failed to decode asset {path}: {e}")
        return None

    return _load


class AssetVariantTable:
    """
    Holds the interactive, ambient and low-bit variants of every element.

    Native bitmaps are kept alongside the scaled ones so that rescaling
    always starts from load-time dimensions and never compounds.
    """

    def __init__(self, loader: BitmapLoader):
        self._loader = loader
        self._native: dict[VisualElement, list[Image.Image]] = {}
        self._scaled: dict[VisualElement, list[Image.Image]] = {}
        self.scale_factor = 1.0

    def load(self, element: VisualElement) -> list[Image.Image]:
        """
        Resolve and store all three variants of an element.

        Raises:
            AssetMissingError: If any variant cannot be resolved
        """
        variants = []
        missing = []
        for mode in MODE_ORDER:
            bitmap = self._loader(element, mode)
            if bitmap is None:
                missing.append(mode.value)
            else:
                variants.append(bitmap)

        if missing:
            raise AssetMissingError(element.value, missing)

        self._native[element] = variants
        self._scaled[element] = list(variants)
        logger.debug(
            f"Loaded {element.value}: "
            + ", ".join(f"{b.width}x{b.height}" for b in variants)
        )
        return list(variants)

    def load_all(self) -> None:
        """Load every element. Raises AssetMissingError on the first incomplete one."""
        for element in VisualElement:
            self.load(element)
        logger.info(f"Loaded {len(VisualElement) * len(MODE_ORDER)} bitmap variants")

    @property
    def loaded(self) -> bool:
        return all(element in self._scaled for element in VisualElement)

    def select(self, element: VisualElement, mode: Mode) -> Image.Image:
        """Return the current (scaled) variant of ``element`` for ``mode``."""
        return self._scaled[element][MODE_ORDER.index(mode)]

    def native_size(self, element: VisualElement, mode: Mode) -> tuple[int, int]:
        """Load-time dimensions of a variant."""
        return self._native[element][MODE_ORDER.index(mode)].size

    def rescale(self, factor: float) -> int:
        """
        Scale every variant to ``factor`` times its native size.

        Variants whose target size already matches are left untouched.

        Args:
            factor: Scale factor. 1.0 represents the native size.

        Returns:
            Number of bitmaps that were actually resized
        """
        if factor <= 0:
            raise ValueError(f"Scale factor must be positive, got {factor}")

        resized = 0
        for element, natives in self._native.items():
            scaled = self._scaled[element]
            for i, native in enumerate(natives):
                target = (
                    max(1, int(native.width * factor)),
                    max(1, int(native.height * factor)),
                )
                if scaled[i].size == target:
                    continue
                if native.size == target:
                    scaled[i] = native
                else:
                    scaled[i] = native.resize(target, Image.Resampling.LANCZOS)
                resized += 1

        self.scale_factor = factor
        if resized:
            logger.debug(f"Rescaled {resized} bitmaps by {factor:.3f}")
        return resized

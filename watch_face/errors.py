"""Exceptions raised by the watch face."""


class WatchFaceError(Exception):
    """Base class for watch face errors."""


class AssetMissingError(WatchFaceError):
    """
    Raised when a visual element does not resolve all of its mode variants.

    This is fatal at startup: the face is never activated with a partial
    set of bitmaps.
    """

    def __init__(self, element: str, missing: list[str]):
        self.element = element
        self.missing = missing
        super().__init__(
            f"Missing {len(missing)} of 3 variants for '{element}': "
            + ", ".join(missing)
        )


class InvalidGeometryError(WatchFaceError):
    """Raised for a surface size that cannot be rendered to (width or height <= 0)."""

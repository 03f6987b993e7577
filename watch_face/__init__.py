"""Analog watch face with interactive and ambient rendering modes."""

__version__ = "1.0.0"

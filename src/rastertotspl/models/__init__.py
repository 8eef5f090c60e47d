"""Pydantic models for rastertotspl."""

from rastertotspl.models.job import InkPolarity, PrintJobParameters, Rotation
from rastertotspl.models.page import ColorOrder, ColorSpace, PageGeometry, PageHeader, PixelFormat

__all__ = [
    "ColorOrder",
    "ColorSpace",
    "InkPolarity",
    "PageGeometry",
    "PageHeader",
    "PixelFormat",
    "PrintJobParameters",
    "Rotation",
]

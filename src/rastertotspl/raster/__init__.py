"""Raster page sources."""

from typing import BinaryIO

from rastertotspl.raster.base import BaseRasterSource
from rastertotspl.raster.cups import SYNC_WORDS, CupsRasterReader
from rastertotspl.raster.image import ImageRasterSource

__all__ = [
    "BaseRasterSource",
    "CupsRasterReader",
    "ImageRasterSource",
    "is_cups_raster",
]


def is_cups_raster(stream: BinaryIO) -> bool:
    """Check whether a seekable stream starts with a CUPS raster sync word.

    The stream position is left unchanged.
    """
    position = stream.tell()
    try:
        return stream.read(4) in SYNC_WORDS
    finally:
        stream.seek(position)

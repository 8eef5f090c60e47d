"""Raster to TSPL conversion pipeline."""

from rastertotspl.tspl.commands import page_to_tspl
from rastertotspl.tspl.decoder import PixelDecoder, PixelEncoding, decode_pixel
from rastertotspl.tspl.driver import ConversionSummary, PageResult, TSPLConverter
from rastertotspl.tspl.geometry import resolve_geometry
from rastertotspl.tspl.packer import pack_scanline, unpack_scanline

__all__ = [
    "ConversionSummary",
    "PageResult",
    "PixelDecoder",
    "PixelEncoding",
    "TSPLConverter",
    "decode_pixel",
    "pack_scanline",
    "page_to_tspl",
    "resolve_geometry",
    "unpack_scanline",
]

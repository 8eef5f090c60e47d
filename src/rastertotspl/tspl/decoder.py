"""Threshold raster pixels into ink decisions."""

from collections.abc import Callable, Iterator
from enum import StrEnum

from rastertotspl.exceptions import UnsupportedFormatError
from rastertotspl.models.page import PixelFormat

# Samples below this value are dark enough to print
INK_THRESHOLD = 128


class PixelEncoding(StrEnum):
    """Pixel layouts the decoder has a rule for."""

    MONO = "mono"
    GRAY8 = "gray8"
    RGB24 = "rgb24"
    GENERIC = "generic"


def _mono(line: bytes, idx: int, bytes_per_line: int, bytes_per_pixel: int) -> bool | None:
    byte_pos = idx // 8
    if byte_pos >= bytes_per_line or byte_pos >= len(line):
        return None
    return bool((line[byte_pos] >> (7 - idx % 8)) & 1)


def _gray8(line: bytes, idx: int, bytes_per_line: int, bytes_per_pixel: int) -> bool | None:
    if idx >= bytes_per_line or idx >= len(line):
        return None
    return line[idx] < INK_THRESHOLD


def _rgb24(line: bytes, idx: int, bytes_per_line: int, bytes_per_pixel: int) -> bool | None:
    offset = idx * 3
    if offset + 2 >= min(bytes_per_line, len(line)):
        return None
    r, g, b = line[offset], line[offset + 1], line[offset + 2]
    luminance = (r * 299 + g * 587 + b * 114) // 1000
    return luminance < INK_THRESHOLD


def _generic(line: bytes, idx: int, bytes_per_line: int, bytes_per_pixel: int) -> bool | None:
    offset = idx * bytes_per_pixel
    end = min(offset + bytes_per_pixel, bytes_per_line, len(line))
    if offset >= end:
        return None
    # A partial pixel still divides by the full pixel width
    average = sum(line[offset:end]) // bytes_per_pixel
    return average < INK_THRESHOLD


_RULES: dict[PixelEncoding, Callable[[bytes, int, int, int], bool | None]] = {
    PixelEncoding.MONO: _mono,
    PixelEncoding.GRAY8: _gray8,
    PixelEncoding.RGB24: _rgb24,
    PixelEncoding.GENERIC: _generic,
}


def select_encoding(bits_per_pixel: int) -> tuple[PixelEncoding, int]:
    """Pick the decoding rule for a bit depth.

    Returns:
        Tuple of (encoding, bytes_per_pixel). Monochrome reports 0 bytes per pixel.

    Raises:
        UnsupportedFormatError: If the depth is not 1 and not a positive multiple of 8.
    """
    if bits_per_pixel == 1:
        return PixelEncoding.MONO, 0
    if bits_per_pixel == 8:
        return PixelEncoding.GRAY8, 1
    if bits_per_pixel == 24:
        return PixelEncoding.RGB24, 3
    if bits_per_pixel > 0 and bits_per_pixel % 8 == 0:
        return PixelEncoding.GENERIC, bits_per_pixel // 8
    raise UnsupportedFormatError(f"Unsupported bits per pixel: {bits_per_pixel}")


class PixelDecoder:
    """Ink decision rule for one page's pixel format.

    The rule is chosen once from the format so that decoding a scanline
    does not re-dispatch on the bit depth for every pixel.
    """

    def __init__(self, pixel_format: PixelFormat) -> None:
        self.pixel_format = pixel_format
        self.encoding, self.bytes_per_pixel = select_encoding(pixel_format.bits_per_pixel)
        self._rule = _RULES[self.encoding]

    @property
    def invert(self) -> bool:
        return self.pixel_format.invert

    def is_ink(self, line: bytes, idx: int) -> bool:
        """Decide whether pixel ``idx`` of ``line`` is printed.

        Pixels that lie outside the declared or actual line length are
        never ink.
        """
        decision = self._rule(line, idx, self.pixel_format.bytes_per_line, self.bytes_per_pixel)
        if decision is None:
            return False
        return decision != self.invert

    def decode_line(self, line: bytes, width: int) -> Iterator[bool]:
        """Yield the ink decision for each of the ``width`` pixels in ``line``."""
        rule = self._rule
        bytes_per_line = self.pixel_format.bytes_per_line
        bytes_per_pixel = self.bytes_per_pixel
        invert = self.invert
        for idx in range(width):
            decision = rule(line, idx, bytes_per_line, bytes_per_pixel)
            yield decision is not None and decision != invert


def decode_pixel(pixel_format: PixelFormat, line: bytes, idx: int) -> bool:
    """Ink decision for a single pixel."""
    return PixelDecoder(pixel_format).is_ink(line, idx)

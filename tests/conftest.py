"""Pytest configuration and fixtures."""

import io
import struct
from collections.abc import Callable

import pytest

from rastertotspl.exceptions import TruncatedScanlineError
from rastertotspl.models.page import ColorSpace, PageHeader
from rastertotspl.raster.base import BaseRasterSource

SYNC = {
    (1, ">"): b"RaSt",
    (1, "<"): b"tSaR",
    (2, ">"): b"RaS2",
    (2, "<"): b"2SaR",
    (3, ">"): b"RaS3",
    (3, "<"): b"3SaR",
}


def raster_header_bytes(
    width: int,
    height: int,
    bits_per_pixel: int,
    bytes_per_line: int | None = None,
    dpi: tuple[int, int] = (203, 203),
    color_space: int = ColorSpace.K,
    color_order: int = 0,
    bits_per_color: int | None = None,
    compression: int = 0,
    num_copies: int = 1,
    media_type: str = "",
    page_size_name: str = "",
    byte_order: str = ">",
    size: int = 1796,
) -> bytes:
    """Pack a cups_page_header2_t (or the 420-byte version 1 header)."""
    if bytes_per_line is None:
        bytes_per_line = (width * bits_per_pixel + 7) // 8
    if bits_per_color is None:
        bits_per_color = 1 if bits_per_pixel == 1 else 8
    data = bytearray(size)
    data[128 : 128 + len(media_type)] = media_type.encode("ascii")
    struct.pack_into(f"{byte_order}2I", data, 276, *dpi)
    struct.pack_into(f"{byte_order}I", data, 340, num_copies)
    struct.pack_into(
        f"{byte_order}9I",
        data,
        372,
        width,
        height,
        0,
        bits_per_color,
        bits_per_pixel,
        bytes_per_line,
        color_order,
        color_space,
        compression,
    )
    if size >= 1796 and page_size_name:
        data[1732 : 1732 + len(page_size_name)] = page_size_name.encode("ascii")
    return bytes(data)


@pytest.fixture
def build_raster() -> Callable[..., io.BytesIO]:
    """Build an in-memory CUPS raster stream.

    ``pages`` is a list of (header kwargs, body bytes) pairs; the body is
    written as-is, so version 2 bodies must already be compressed.
    """

    def build(pages: list[tuple[dict, bytes]], version: int = 3, byte_order: str = ">") -> io.BytesIO:
        stream = bytearray(SYNC[(version, byte_order)])
        size = 420 if version == 1 else 1796
        for header_kwargs, body in pages:
            kwargs = {"compression": 1 if version == 2 else 0, **header_kwargs}
            stream += raster_header_bytes(byte_order=byte_order, size=size, **kwargs)
            stream += body
        return io.BytesIO(bytes(stream))

    return build


@pytest.fixture
def compress_line() -> Callable[[bytes, int], bytes]:
    """Encode one scanline as a version 2 line, one pixel run per pixel."""

    def compress(line: bytes, unit: int = 1) -> bytes:
        encoded = bytearray(b"\x00")  # Line occurs once
        for offset in range(0, len(line), unit):
            encoded += b"\x00" + line[offset : offset + unit]
        return bytes(encoded)

    return compress


class FakeRasterSource(BaseRasterSource):
    """Raster source serving pre-built pages for tests.

    Each page is a (header, lines) pair; a page with fewer lines than its
    header declares behaves like a stream that ends mid-page.
    """

    def __init__(self, pages: list[tuple[PageHeader, list[bytes]]]) -> None:
        self._pages = list(pages)
        self._lines: list[bytes] = []
        self._header: PageHeader | None = None
        self.closed = False

    def read_header(self) -> PageHeader | None:
        if not self._pages:
            return None
        self._header, lines = self._pages.pop(0)
        self._lines = list(lines)
        return self._header

    def read_scanline(self) -> bytes:
        expected = self._header.bytes_per_line if self._header else 0
        if not self._lines:
            raise TruncatedScanlineError(0, expected, 0)
        return self._lines.pop(0)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_source() -> Callable[..., FakeRasterSource]:
    """Factory for FakeRasterSource instances."""
    return FakeRasterSource

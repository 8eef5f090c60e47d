"""Reader for CUPS raster streams (application/vnd.cups-raster).

Supported stream versions, identified by the sync word:

- ``RaSt`` / ``tSaR``: version 1, 420-byte headers, uncompressed
- ``RaS2`` / ``2SaR``: version 2 (and PWG raster), 1796-byte headers, compressed
- ``RaS3`` / ``3SaR``: version 3, 1796-byte headers, uncompressed

The sync word also gives the byte order of all header integers: ``RaSx``
is big-endian, the reversed form is little-endian.
"""

import logging
import struct
from pathlib import Path
from typing import BinaryIO

from rastertotspl.exceptions import RasterFormatError, TruncatedScanlineError
from rastertotspl.models.page import ColorOrder, PageHeader
from rastertotspl.raster.base import BaseRasterSource

logger = logging.getLogger(__name__)

V1_HEADER_SIZE = 420
V2_HEADER_SIZE = 1796

# sync word -> (version, struct byte order)
SYNC_WORDS: dict[bytes, tuple[int, str]] = {
    b"RaSt": (1, ">"),
    b"tSaR": (1, "<"),
    b"RaS2": (2, ">"),
    b"2SaR": (2, "<"),
    b"RaS3": (3, ">"),
    b"3SaR": (3, "<"),
}

# Byte offsets into cups_page_header2_t
_MEDIA_TYPE = 128
_HW_RESOLUTION = 276
_NUM_COPIES = 340
_CUPS_WIDTH = 372  # cupsWidth .. cupsCompression are consecutive
_CUPS_PAGE_SIZE_NAME = 1732
_STRING_SIZE = 64

# Control byte of a compressed line that clears the rest of the line
_CLEAR_TO_END = 128


def _c_string(data: bytes, offset: int) -> str:
    raw = data[offset : offset + _STRING_SIZE]
    return raw.split(b"\x00", 1)[0].decode("ascii", errors="replace")


def parse_header(data: bytes, byte_order: str) -> PageHeader:
    """Decode a raster page header.

    Args:
        data: Header bytes, at least 420 long (1796 for version 2 and 3).
        byte_order: ``">"`` or ``"<"``.
    """
    x_dpi, y_dpi = struct.unpack_from(f"{byte_order}2I", data, _HW_RESOLUTION)
    (num_copies,) = struct.unpack_from(f"{byte_order}I", data, _NUM_COPIES)
    (
        width,
        height,
        _media_type_id,
        bits_per_color,
        bits_per_pixel,
        bytes_per_line,
        color_order,
        color_space,
        compression,
    ) = struct.unpack_from(f"{byte_order}9I", data, _CUPS_WIDTH)

    page_size_name = ""
    if len(data) >= V2_HEADER_SIZE:
        page_size_name = _c_string(data, _CUPS_PAGE_SIZE_NAME)

    return PageHeader(
        width=width,
        height=height,
        hw_resolution=(x_dpi, y_dpi),
        bits_per_color=bits_per_color,
        bits_per_pixel=bits_per_pixel,
        bytes_per_line=bytes_per_line,
        color_order=color_order,
        color_space=color_space,
        compression=compression,
        num_copies=num_copies,
        media_type=_c_string(data, _MEDIA_TYPE),
        page_size_name=page_size_name,
    )


class CupsRasterReader(BaseRasterSource):
    """Sequential reader for a CUPS raster stream."""

    def __init__(self, stream: BinaryIO, close_stream: bool = False) -> None:
        """Open a raster stream and check its sync word.

        Args:
            stream: Binary stream positioned at the sync word.
            close_stream: Close ``stream`` when the reader is closed.

        Raises:
            RasterFormatError: If the stream does not start with a known sync word.
        """
        self._stream = stream
        self._close_stream = close_stream
        self._eof = False
        self._header: PageHeader | None = None
        self._remaining_rows = 0
        self._line_index = 0
        # Version 2 line repeat state
        self._repeat_line: bytes | None = None
        self._repeat_count = 0

        sync = self._read_exact(4)
        if sync not in SYNC_WORDS:
            if close_stream:
                stream.close()
            raise RasterFormatError(f"Not a CUPS raster stream (sync word {sync!r})")
        self.version, self.byte_order = SYNC_WORDS[sync]
        self.compressed = self.version == 2
        logger.debug(f"CUPS raster v{self.version}, {'big' if self.byte_order == '>' else 'little'}-endian")

    @classmethod
    def open(cls, path: Path | str) -> "CupsRasterReader":
        """Open a raster file; the file is closed with the reader."""
        return cls(open(path, "rb"), close_stream=True)

    @property
    def header_size(self) -> int:
        return V1_HEADER_SIZE if self.version == 1 else V2_HEADER_SIZE

    @property
    def header(self) -> PageHeader | None:
        """Header of the current page."""
        return self._header

    def read_header(self) -> PageHeader | None:
        self._skip_remaining()
        if self._eof:
            return None

        data = self._read_exact(self.header_size)
        if not data:
            self._eof = True
            return None
        if len(data) < self.header_size:
            self._eof = True
            raise RasterFormatError(f"Truncated page header: {len(data)} of {self.header_size} bytes")

        header = parse_header(data, self.byte_order)
        self._header = header
        self._remaining_rows = header.height
        self._line_index = 0
        self._repeat_line = None
        self._repeat_count = 0
        return header

    def read_scanline(self) -> bytes:
        header = self._header
        if header is None or self._remaining_rows <= 0 or self._eof:
            expected = header.bytes_per_line if header else 0
            raise TruncatedScanlineError(self._line_index, expected, 0)

        if self.compressed:
            line = self._read_compressed_line(header)
        else:
            line = self._read_exact(header.bytes_per_line)
            if len(line) < header.bytes_per_line:
                self._end_of_data()
                raise TruncatedScanlineError(self._line_index, header.bytes_per_line, len(line))

        self._remaining_rows -= 1
        self._line_index += 1
        return line

    def close(self) -> None:
        if self._close_stream:
            self._stream.close()

    def _end_of_data(self) -> None:
        self._eof = True
        self._remaining_rows = 0

    def _skip_remaining(self) -> None:
        """Discard unread lines of the current page."""
        if self._remaining_rows <= 0 or self._eof:
            return
        logger.debug(f"Skipping {self._remaining_rows} unread line(s) of the current page")
        while self._remaining_rows > 0:
            try:
                self.read_scanline()
            except TruncatedScanlineError:
                break

    def _read_exact(self, size: int) -> bytes:
        """Read ``size`` bytes, fewer only at end of stream."""
        chunks = []
        remaining = size
        while remaining > 0:
            chunk = self._stream.read(remaining)
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)

    def _read_compressed_line(self, header: PageHeader) -> bytes:
        if self._repeat_count <= 0 or self._repeat_line is None:
            repeat = self._read_exact(1)
            if not repeat:
                self._end_of_data()
                raise TruncatedScanlineError(self._line_index, header.bytes_per_line, 0)
            self._repeat_line = self._decompress_line(header)
            self._repeat_count = repeat[0] + 1
        self._repeat_count -= 1
        return self._repeat_line

    def _decompress_line(self, header: PageHeader) -> bytes:
        """Decode one run-length compressed line.

        Control bytes 0-127 repeat the next pixel n + 1 times, 129-255 are
        followed by 257 - n literal pixels, and 128 clears the rest of the
        line to white.
        """
        bytes_per_line = header.bytes_per_line
        if header.color_order == ColorOrder.CHUNKED:
            unit = (header.bits_per_pixel + 7) // 8
        else:
            unit = (header.bits_per_color + 7) // 8
        unit = max(unit, 1)
        white = 0xFF if header.is_additive else 0x00

        line = bytearray()
        while len(line) < bytes_per_line:
            control = self._read_exact(1)
            if not control:
                self._end_of_data()
                raise TruncatedScanlineError(self._line_index, bytes_per_line, len(line))
            count = control[0]
            room = bytes_per_line - len(line)

            if count == _CLEAR_TO_END:
                line.extend(bytes([white]) * room)
            elif count > _CLEAR_TO_END:
                size = min((257 - count) * unit, room)
                literal = self._read_exact(size)
                line += literal
                if len(literal) < size:
                    self._end_of_data()
                    raise TruncatedScanlineError(self._line_index, bytes_per_line, len(line))
            else:
                pixel = self._read_exact(unit)
                if len(pixel) < unit:
                    self._end_of_data()
                    raise TruncatedScanlineError(self._line_index, bytes_per_line, len(line))
                line += (pixel * (count + 1))[:room]
        return bytes(line)

"""Render TSPL commands for one label page.

TSPL BITMAP format:
BITMAP <x>,<y>,<width_bytes>,<height>,<mode>,<binary_data>

Note: the bitmap payload is raw binary, not hex encoded, and scanlines
follow each other without separators.
"""

from collections.abc import Iterable

from rastertotspl.models.job import PrintJobParameters
from rastertotspl.models.page import PageGeometry

LINE_END = b"\n"

# BITMAP mode 0 overwrites the image buffer
BITMAP_MODE_OVERWRITE = 0


def _number(value: float) -> str:
    """Format a millimetre value without a trailing '.0'."""
    return f"{value:g}"


def setup_commands(geometry: PageGeometry, params: PrintJobParameters) -> bytes:
    """Label setup commands that precede the bitmap."""
    lines = [
        f"SIZE {geometry.size_text()}",
        f"GAP {_number(params.gap_mm)} mm,{_number(params.gap_offset_mm)}",
        f"DENSITY {params.density}",
        f"SPEED {params.speed}",
        "DIRECTION 1",
        "CLS",
    ]
    return b"".join(line.encode("ascii") + LINE_END for line in lines)


def bitmap_command(width_bytes: int, lines: Iterable[bytes]) -> bytes:
    """BITMAP command carrying the packed scanlines of a page.

    The declared height is the number of scanlines actually supplied.
    """
    payload = bytearray()
    height = 0
    for line in lines:
        if len(line) != width_bytes:
            raise ValueError(f"Bitmap line {height} is {len(line)} bytes, expected {width_bytes}")
        payload += line
        height += 1
    header = f"BITMAP 0,0,{width_bytes},{height},{BITMAP_MODE_OVERWRITE},".encode("ascii")
    return header + bytes(payload) + LINE_END


def print_command(copies: int = 1) -> bytes:
    return f"PRINT {copies}".encode("ascii") + LINE_END


def page_to_tspl(
    geometry: PageGeometry,
    params: PrintJobParameters,
    width_bytes: int,
    lines: Iterable[bytes],
) -> bytes:
    """Full TSPL command sequence for one page.

    Args:
        geometry: Resolved label geometry.
        params: Job parameters (density, speed, gap).
        width_bytes: Bytes per packed scanline.
        lines: Packed scanlines, top to bottom.

    Returns:
        TSPL commands as bytes.
    """
    return setup_commands(geometry, params) + bitmap_command(width_bytes, lines) + print_command(1)

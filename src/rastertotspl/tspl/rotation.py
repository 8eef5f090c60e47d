"""Rotate a page's ink grid by multiples of 90 degrees."""

from rastertotspl.models.job import Rotation

InkGrid = list[list[bool]]


def rotate_grid(rows: InkGrid, width: int, rotation: Rotation) -> tuple[InkGrid, int]:
    """Rotate ``rows`` clockwise.

    Args:
        rows: Ink decisions, one list of ``width`` entries per scanline.
        width: Number of pixels per row (needed when ``rows`` is empty).
        rotation: Clockwise rotation in degrees.

    Returns:
        Tuple of (rotated rows, rotated width).
    """
    height = len(rows)
    if rotation == Rotation.NONE:
        return rows, width
    if rotation == Rotation.CW_180:
        return [row[::-1] for row in reversed(rows)], width
    if rotation == Rotation.CW_90:
        # New row y is old column y read from the bottom row upwards
        return [[rows[height - 1 - x][y] for x in range(height)] for y in range(width)], height
    # 270: new row y is old column (width - 1 - y) read top-down
    return [[rows[x][width - 1 - y] for x in range(height)] for y in range(width)], height

"""Derive physical label dimensions from raster pages."""

import logging

from rastertotspl.exceptions import ConfigurationError
from rastertotspl.models.page import MM_PER_INCH, PageGeometry

logger = logging.getLogger(__name__)


def _axis_mm(pixels: int, dpi: int, override: float, axis: str) -> float:
    if override > 0:
        return float(override)
    if dpi <= 0:
        raise ConfigurationError(f"Invalid {axis} resolution {dpi} dpi; cannot derive label {axis}")
    return pixels * MM_PER_INCH / dpi


def resolve_geometry(
    width_pixels: int,
    height_pixels: int,
    horizontal_dpi: int,
    vertical_dpi: int,
    width_override_mm: float = 0.0,
    height_override_mm: float = 0.0,
) -> PageGeometry:
    """Compute the label size for a page.

    Each axis uses its override when the override is positive, otherwise
    ``pixels * 25.4 / dpi``.

    Raises:
        ConfigurationError: If an axis has to be derived from a zero or
            negative resolution.
    """
    width_mm = _axis_mm(width_pixels, horizontal_dpi, width_override_mm, "width")
    height_mm = _axis_mm(height_pixels, vertical_dpi, height_override_mm, "height")
    logger.debug(f"Label size: {width_mm:.1f} x {height_mm:.1f} mm")
    return PageGeometry(
        width_pixels=width_pixels,
        height_pixels=height_pixels,
        horizontal_dpi=horizontal_dpi,
        vertical_dpi=vertical_dpi,
        width_mm=width_mm,
        height_mm=height_mm,
    )

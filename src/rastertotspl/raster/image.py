"""Raster source backed by PIL images."""

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from PIL import Image, ImageSequence

from rastertotspl.exceptions import TruncatedScanlineError
from rastertotspl.models.page import ColorSpace, PageHeader
from rastertotspl.raster.base import BaseRasterSource

logger = logging.getLogger(__name__)

DEFAULT_DPI = 203

# PIL mode -> (bits per pixel, color space)
_NATIVE_MODES: dict[str, tuple[int, ColorSpace]] = {
    "1": (1, ColorSpace.W),  # PIL: 0 = black, 1 = white
    "L": (8, ColorSpace.W),
    "RGB": (24, ColorSpace.RGB),
}


def normalize_image(image: Image.Image) -> Image.Image:
    """Convert an image to a mode the raster pipeline reads directly.

    Transparent areas are composited over white so they do not print.
    """
    if image.mode in _NATIVE_MODES:
        return image

    if image.mode in ("RGBA", "LA", "PA") or "transparency" in image.info:
        background = Image.new("RGBA", image.size, (255, 255, 255, 255))
        background.alpha_composite(image.convert("RGBA"))
        target = "L" if image.mode == "LA" else "RGB"
        return background.convert(target)

    if image.mode in ("I", "I;16", "I;16B", "I;16L", "F"):
        return image.convert("L")

    return image.convert("RGB")


def image_dpi(image: Image.Image, default: int = DEFAULT_DPI) -> tuple[int, int]:
    """Resolution stored in the image, or ``default`` on both axes."""
    dpi = image.info.get("dpi")
    if not dpi:
        return default, default
    x_dpi, y_dpi = (round(float(value)) for value in dpi)
    return x_dpi or default, y_dpi or default


class ImageRasterSource(BaseRasterSource):
    """Serve PIL images as raster pages, one page per image."""

    def __init__(
        self,
        images: Iterable[Image.Image],
        dpi: int | None = None,
        default_dpi: int = DEFAULT_DPI,
    ) -> None:
        """Create an image source.

        Args:
            images: Images to serve, in page order.
            dpi: Resolution for every page. Defaults to each image's stored DPI.
            default_dpi: Resolution for images that do not store one.
        """
        self._images: Iterator[Image.Image] = iter(images)
        self._dpi = dpi
        self._default_dpi = default_dpi
        self._rows: list[bytes] = []
        self._header: PageHeader | None = None
        self._line_index = 0

    @classmethod
    def from_paths(
        cls,
        paths: Iterable[Path | str],
        dpi: int | None = None,
        default_dpi: int = DEFAULT_DPI,
    ) -> "ImageRasterSource":
        """Create a source from image files; multi-frame files yield one page per frame."""

        def frames() -> Iterator[Image.Image]:
            for path in paths:
                with Image.open(path) as image:
                    for frame in ImageSequence.Iterator(image):
                        # Keep the file's DPI on the copied frame
                        page = frame.copy()
                        page.info.setdefault("dpi", image.info.get("dpi"))
                        yield page

        return cls(frames(), dpi=dpi, default_dpi=default_dpi)

    def read_header(self) -> PageHeader | None:
        image = next(self._images, None)
        if image is None:
            self._header = None
            self._rows = []
            return None

        dpi = (self._dpi, self._dpi) if self._dpi else image_dpi(image, self._default_dpi)
        image = normalize_image(image)
        bits_per_pixel, color_space = _NATIVE_MODES[image.mode]
        width, height = image.size
        bytes_per_line = (width * bits_per_pixel + 7) // 8

        data = image.tobytes()
        self._rows = [data[y * bytes_per_line : (y + 1) * bytes_per_line] for y in range(height)]
        self._line_index = 0
        self._header = PageHeader(
            width=width,
            height=height,
            hw_resolution=dpi,
            bits_per_color=1 if bits_per_pixel == 1 else 8,
            bits_per_pixel=bits_per_pixel,
            bytes_per_line=bytes_per_line,
            color_space=color_space,
        )
        logger.debug(f"Image page {width}x{height} mode {image.mode} at {dpi[0]}x{dpi[1]} dpi")
        return self._header

    def read_scanline(self) -> bytes:
        if self._header is None or self._line_index >= len(self._rows):
            expected = self._header.bytes_per_line if self._header else 0
            raise TruncatedScanlineError(self._line_index, expected, 0)
        line = self._rows[self._line_index]
        self._line_index += 1
        return line

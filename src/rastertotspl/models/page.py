"""Raster page models."""

from enum import IntEnum

from pydantic import BaseModel, ConfigDict, Field

MM_PER_INCH = 25.4


class ColorSpace(IntEnum):
    """CUPS raster color spaces (cups_cspace_t)."""

    W = 0
    RGB = 1
    RGBA = 2
    K = 3
    CMY = 4
    YMC = 5
    CMYK = 6
    YMCK = 7
    KCMY = 8
    KCMYCM = 9
    GMCK = 10
    GMCS = 11
    WHITE = 12
    GOLD = 13
    SILVER = 14
    CIEXYZ = 15
    CIELAB = 16
    RGBW = 17
    SW = 18
    SRGB = 19
    ADOBERGB = 20


# Color spaces where a zero sample means black (no light)
ADDITIVE_COLOR_SPACES = frozenset(
    {
        ColorSpace.W,
        ColorSpace.RGB,
        ColorSpace.RGBA,
        ColorSpace.RGBW,
        ColorSpace.SW,
        ColorSpace.SRGB,
        ColorSpace.ADOBERGB,
    }
)


class ColorOrder(IntEnum):
    """CUPS raster color orders (cups_order_t)."""

    CHUNKED = 0
    BANDED = 1
    PLANAR = 2


class PixelFormat(BaseModel):
    """Pixel encoding of one page's scanlines.

    With ``invert`` unset, a 1-bit sample of 1 is ink and 8-bit-or-deeper
    samples are light intensities (low values are ink). ``invert`` flips
    that convention for sources that state the opposite polarity.
    """

    model_config = ConfigDict(frozen=True)

    bits_per_pixel: int = Field(ge=0)
    bytes_per_line: int = Field(ge=0)
    invert: bool = False

    def min_bytes_per_line(self, width: int) -> int:
        """Smallest row stride that holds ``width`` pixels."""
        return (width * self.bits_per_pixel + 7) // 8


class PageHeader(BaseModel):
    """Per-page metadata produced by a raster source."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(ge=0)
    height: int = Field(ge=0)
    hw_resolution: tuple[int, int] = (203, 203)
    bits_per_color: int = 1
    bits_per_pixel: int = 1
    bytes_per_line: int = 0
    color_order: int = ColorOrder.CHUNKED
    color_space: int = ColorSpace.K
    compression: int = 0
    num_copies: int = 1
    media_type: str = ""
    page_size_name: str = ""

    @property
    def x_dpi(self) -> int:
        return self.hw_resolution[0]

    @property
    def y_dpi(self) -> int:
        return self.hw_resolution[1]

    @property
    def is_additive(self) -> bool:
        """Whether samples are light intensities (0 = black)."""
        return self.color_space in ADDITIVE_COLOR_SPACES

    @property
    def pixel_format(self) -> PixelFormat:
        """Pixel format with polarity derived from the color space.

        1-bit additive data uses 1 for white, and deeper subtractive data
        uses high values for ink; both are the opposite of the decoder's
        native convention.
        """
        if self.bits_per_pixel == 1:
            invert = self.is_additive
        else:
            invert = not self.is_additive
        return PixelFormat(
            bits_per_pixel=self.bits_per_pixel,
            bytes_per_line=self.bytes_per_line,
            invert=invert,
        )


class PageGeometry(BaseModel):
    """Physical label size of a page."""

    model_config = ConfigDict(frozen=True)

    width_pixels: int
    height_pixels: int
    horizontal_dpi: int
    vertical_dpi: int
    width_mm: float
    height_mm: float

    @property
    def width_bytes(self) -> int:
        return (self.width_pixels + 7) // 8

    def size_text(self) -> str:
        """Label size as used by the SIZE command."""
        return f"{self.width_mm:.1f} mm,{self.height_mm:.1f} mm"

"""Print job parameter models."""

from enum import IntEnum, StrEnum

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_DENSITY = 8
DEFAULT_SPEED = 4
DEFAULT_GAP_MM = 2.0

DENSITY_RANGE = (1, 15)
SPEED_RANGE = (1, 6)


class Rotation(IntEnum):
    """Clockwise rotation applied to each page before packing."""

    NONE = 0
    CW_90 = 90
    CW_180 = 180
    CW_270 = 270


class InkPolarity(StrEnum):
    """How a page's pixel polarity is chosen."""

    AUTO = "auto"  # Derived from the raster source's color space
    NORMAL = "normal"  # 1-bit 1 = ink, deeper samples low = ink
    INVERTED = "inverted"


class PrintJobParameters(BaseModel):
    """Job-wide settings, read-only during conversion."""

    model_config = ConfigDict(frozen=True)

    density: int = Field(default=DEFAULT_DENSITY, ge=DENSITY_RANGE[0], le=DENSITY_RANGE[1])
    speed: int = Field(default=DEFAULT_SPEED, ge=SPEED_RANGE[0], le=SPEED_RANGE[1])
    gap_mm: float = Field(default=DEFAULT_GAP_MM, ge=0, allow_inf_nan=False)
    gap_offset_mm: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    label_width_mm: float = Field(default=0.0, allow_inf_nan=False)  # <= 0 derives the width from the page
    label_height_mm: float = Field(default=0.0, allow_inf_nan=False)
    rotation: Rotation = Rotation.NONE
    ink_polarity: InkPolarity = InkPolarity.AUTO

    def resolve_invert(self, source_invert: bool) -> bool:
        """Apply the polarity override to a source's stated polarity."""
        if self.ink_polarity == InkPolarity.NORMAL:
            return False
        if self.ink_polarity == InkPolarity.INVERTED:
            return True
        return source_invert

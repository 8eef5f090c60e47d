"""Exceptions raised while converting raster pages to TSPL."""


class ConversionError(Exception):
    """Base class for all conversion errors."""


class ConfigurationError(ConversionError):
    """Raised when page or job parameters cannot be used for conversion.

    Examples are a zero or negative resolution on an axis whose size has to
    be derived, or a bit depth the pixel decoder has no rule for.
    """


class UnsupportedFormatError(ConfigurationError):
    """Raised when bits-per-pixel is neither 1 nor a positive multiple of 8."""


class TruncatedScanlineError(ConversionError):
    """Raised by a raster source when a scanline could not be read in full."""

    def __init__(self, line: int, expected: int, received: int) -> None:
        self.line = line
        self.expected = expected
        self.received = received
        super().__init__(f"Scanline {line} truncated: expected {expected} bytes, got {received}")


class AllocationError(ConversionError):
    """Raised when a page buffer cannot be allocated."""


class RasterFormatError(ConversionError):
    """Raised when the input is not a readable raster stream."""

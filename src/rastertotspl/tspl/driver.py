"""Convert raster pages to TSPL print jobs."""

import logging
from collections.abc import Iterator
from typing import BinaryIO

from pydantic import BaseModel

from rastertotspl.exceptions import (
    AllocationError,
    ConfigurationError,
    TruncatedScanlineError,
)
from rastertotspl.models.job import PrintJobParameters, Rotation
from rastertotspl.models.page import PageGeometry, PageHeader, PixelFormat
from rastertotspl.raster.base import BaseRasterSource
from rastertotspl.tspl.commands import page_to_tspl
from rastertotspl.tspl.decoder import PixelDecoder, PixelEncoding
from rastertotspl.tspl.geometry import resolve_geometry
from rastertotspl.tspl.packer import copy_mono_scanline, pack_scanline, width_to_bytes
from rastertotspl.tspl.rotation import rotate_grid

logger = logging.getLogger(__name__)


class PageResult(BaseModel):
    """Outcome of converting one page."""

    page: int
    lines_read: int  # Source scanlines that made it into the bitmap
    nominal_lines: int  # Scanlines declared by the page header
    geometry: PageGeometry
    data: bytes

    @property
    def truncated(self) -> bool:
        return self.lines_read < self.nominal_lines


class ConversionSummary(BaseModel):
    """Page counts for a whole job."""

    pages: int = 0
    converted: int = 0
    truncated: int = 0
    failed: int = 0


class TSPLConverter:
    """Writes one TSPL label job per raster page to an output stream.

    Each page is assembled in memory and written with a single ``write()``,
    so a page that fails never leaves partial commands in the output.
    """

    def __init__(self, params: PrintJobParameters, output: BinaryIO) -> None:
        self.params = params
        self.output = output
        self._page = 0
        self._lines_read = 0

    def convert(self, source: BaseRasterSource) -> ConversionSummary:
        """Convert every page of ``source`` until it is exhausted."""
        summary = ConversionSummary()
        for header in source.pages():
            summary.pages += 1
            try:
                result = self.convert_page(header, source)
            except (ConfigurationError, AllocationError) as e:
                summary.failed += 1
                logger.error(f"Page {self._page}: {e}; skipping page")
                continue

            self.output.write(result.data)
            self.output.flush()
            summary.converted += 1
            if result.truncated:
                summary.truncated += 1

        logger.info(
            f"Converted {summary.converted} of {summary.pages} page(s)"
            f" ({summary.truncated} truncated, {summary.failed} failed)"
        )
        return summary

    def convert_page(self, header: PageHeader, source: BaseRasterSource) -> PageResult:
        """Read the scanlines of one page and render its TSPL commands.

        Args:
            header: Header of the page, as returned by ``source.read_header()``.
            source: Raster source positioned at the page's first scanline.

        Returns:
            The rendered page.

        Raises:
            ConfigurationError: If the page's format or resolution cannot be used.
            AllocationError: If the page buffers cannot be allocated.
        """
        self._page += 1
        page = self._page
        logger.debug(f"Processing page {page}")
        logger.debug(f"Page size: {header.width}x{header.height} pixels")
        logger.debug(f"Resolution: {header.x_dpi}x{header.y_dpi} dpi")
        logger.debug(f"Bits per pixel: {header.bits_per_pixel}")
        logger.debug(f"Bytes per line: {header.bytes_per_line}")

        pixel_format = self._pixel_format(header)
        decoder = PixelDecoder(pixel_format)

        min_stride = pixel_format.min_bytes_per_line(header.width)
        if pixel_format.bytes_per_line < min_stride:
            logger.warning(
                f"Page {page}: {pixel_format.bytes_per_line} bytes per line is less than the"
                f" {min_stride} needed for {header.width} pixels; missing pixels will not print"
            )

        rotation = self.params.rotation
        if rotation in (Rotation.CW_90, Rotation.CW_270):
            width_px, height_px = header.height, header.width
            x_dpi, y_dpi = header.y_dpi, header.x_dpi
        else:
            width_px, height_px = header.width, header.height
            x_dpi, y_dpi = header.x_dpi, header.y_dpi

        # Resolve before reading so a bad resolution skips the page early
        geometry = resolve_geometry(
            width_px,
            height_px,
            x_dpi,
            y_dpi,
            self.params.label_width_mm,
            self.params.label_height_mm,
        )

        try:
            if rotation == Rotation.NONE:
                lines = list(self._packed_lines(header, decoder, source))
            else:
                lines, width_px = self._rotated_lines(header, decoder, source, rotation)
        except MemoryError as e:
            raise AllocationError(f"Unable to allocate buffers for page {page}") from e

        data = page_to_tspl(geometry, self.params, width_to_bytes(width_px), lines)
        return PageResult(
            page=page,
            lines_read=self._lines_read,
            nominal_lines=header.height,
            geometry=geometry,
            data=data,
        )

    def _pixel_format(self, header: PageHeader) -> PixelFormat:
        source_format = header.pixel_format
        invert = self.params.resolve_invert(source_format.invert)
        if invert != source_format.invert:
            logger.debug(f"Ink polarity overridden: invert={invert}")
        return source_format.model_copy(update={"invert": invert})

    def _scanlines(self, header: PageHeader, source: BaseRasterSource) -> Iterator[bytes]:
        """Yield the page's raw scanlines, stopping early on a short read."""
        self._lines_read = 0
        for y in range(header.height):
            try:
                line = source.read_scanline()
                if len(line) < header.bytes_per_line:
                    raise TruncatedScanlineError(y, header.bytes_per_line, len(line))
            except TruncatedScanlineError as e:
                logger.warning(f"Page {self._page}: unable to read line {y} ({e}); ending page after {y} line(s)")
                return
            self._lines_read += 1
            yield line

    def _packed_lines(
        self,
        header: PageHeader,
        decoder: PixelDecoder,
        source: BaseRasterSource,
    ) -> Iterator[bytearray]:
        width = header.width
        if decoder.encoding == PixelEncoding.MONO:
            for line in self._scanlines(header, source):
                yield copy_mono_scanline(line[: header.bytes_per_line], width, decoder.invert)
        else:
            for line in self._scanlines(header, source):
                yield pack_scanline(decoder.decode_line(line, width), width)

    def _rotated_lines(
        self,
        header: PageHeader,
        decoder: PixelDecoder,
        source: BaseRasterSource,
        rotation: Rotation,
    ) -> tuple[list[bytearray], int]:
        rows = [list(decoder.decode_line(line, header.width)) for line in self._scanlines(header, source)]
        rotated, width = rotate_grid(rows, header.width, rotation)
        return [pack_scanline(row, width) for row in rotated], width

"""Abstract base class for raster page sources."""

from abc import ABC, abstractmethod
from collections.abc import Iterator

from rastertotspl.models.page import PageHeader


class BaseRasterSource(ABC):
    """Sequential producer of page headers and scanlines.

    Pages are consumed in order: ``read_header()`` starts the next page and
    ``read_scanline()`` returns its lines top to bottom. Unread lines of the
    current page are discarded when the next header is read.
    """

    @abstractmethod
    def read_header(self) -> PageHeader | None:
        """Start the next page.

        Returns:
            The page header, or None when the source is exhausted.
        """
        pass

    @abstractmethod
    def read_scanline(self) -> bytes:
        """Read the next scanline of the current page.

        Returns:
            Exactly ``bytes_per_line`` bytes.

        Raises:
            TruncatedScanlineError: If the line could not be read in full.
        """
        pass

    def close(self) -> None:
        """Release any resources held by the source."""
        pass

    def pages(self) -> Iterator[PageHeader]:
        """Iterate over page headers until the source is exhausted."""
        while (header := self.read_header()) is not None:
            yield header

    def __enter__(self) -> "BaseRasterSource":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

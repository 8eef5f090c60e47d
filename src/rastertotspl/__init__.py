"""CUPS raster to TSPL label printer filter."""

__version__ = "0.1.0"

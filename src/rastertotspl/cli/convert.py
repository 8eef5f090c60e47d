"""CLI tool for converting images or CUPS raster files to TSPL."""

import argparse
import logging
import sys
from pathlib import Path

from rastertotspl.config import job_parameters, load_config, settings
from rastertotspl.exceptions import ConfigurationError, RasterFormatError
from rastertotspl.raster import BaseRasterSource, CupsRasterReader, ImageRasterSource, is_cups_raster
from rastertotspl.tspl.driver import ConversionSummary, TSPLConverter


def _open_source(path: Path, dpi: int | None, default_dpi: int) -> BaseRasterSource:
    """Open ``path`` as CUPS raster if it has a sync word, otherwise as an image."""
    with open(path, "rb") as f:
        raster = is_cups_raster(f)
    if raster:
        return CupsRasterReader.open(path)
    return ImageRasterSource.from_paths([path], dpi=dpi, default_dpi=default_dpi)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for rastertotspl-convert CLI."""
    parser = argparse.ArgumentParser(
        description="Convert images or CUPS raster files to TSPL label printer commands.",
        prog="rastertotspl-convert",
    )
    parser.add_argument(
        "inputs",
        type=Path,
        nargs="+",
        help="Image or CUPS raster files; each image (or frame) becomes one label",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output file path (default: stdout)",
    )
    parser.add_argument("--dpi", type=int, default=None, help="Image resolution (default: from image, else config)")
    parser.add_argument("--density", help="Print density 1-15")
    parser.add_argument("--speed", help="Print speed 1-6")
    parser.add_argument("--label-width", help="Label width in mm (default: derive from image)")
    parser.add_argument("--label-height", help="Label height in mm (default: derive from image)")
    parser.add_argument("--gap", help="Gap between labels in mm")
    parser.add_argument("--rotate", help="Clockwise rotation: 0, 90, 180 or 270")
    parser.add_argument("--ink-polarity", choices=["auto", "normal", "inverted"], help="Ink polarity")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML config file (default: RASTERTOTSPL_CONFIG_FILE)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args(argv)

    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if args.verbose or settings.debug else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    for path in args.inputs:
        if not path.exists():
            print(f"Error: Input file not found: {path}", file=sys.stderr)
            return 1

    try:
        config = load_config(args.config or settings.config_file)
    except (ConfigurationError, OSError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return 1

    # Command line flags use the same names as the CUPS options
    options = {
        name: value
        for name, value in (
            ("density", args.density),
            ("speed", args.speed),
            ("label-width", args.label_width),
            ("label-height", args.label_height),
            ("gap", args.gap),
            ("rotate", args.rotate),
            ("ink-polarity", args.ink_polarity),
        )
        if value is not None
    }
    params = job_parameters(options, config.defaults)

    if args.output is None:
        output = sys.stdout.buffer
    else:
        try:
            output = open(args.output, "wb")
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            return 1

    total = ConversionSummary()
    converter = TSPLConverter(params, output)
    try:
        for path in args.inputs:
            try:
                source = _open_source(path, args.dpi, config.image_dpi)
                with source:
                    summary = converter.convert(source)
            except (RasterFormatError, OSError) as e:
                print(f"Error converting {path}: {e}", file=sys.stderr)
                return 1
            total.pages += summary.pages
            total.converted += summary.converted
            total.truncated += summary.truncated
            total.failed += summary.failed
    finally:
        if args.output is not None:
            output.close()

    if args.output is not None:
        print(f"Converted {total.converted} label(s) to {args.output}", file=sys.stderr)

    if total.failed and not total.converted:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""CUPS filter entry point: convert CUPS raster on stdin or a file to TSPL on stdout."""

import argparse
import logging
import sys
from pathlib import Path

from rastertotspl.config import job_parameters, load_config, parse_cups_options, settings
from rastertotspl.exceptions import ConfigurationError, RasterFormatError
from rastertotspl.models.job import DEFAULT_DENSITY, DEFAULT_SPEED
from rastertotspl.raster import CupsRasterReader
from rastertotspl.tspl.driver import TSPLConverter

logger = logging.getLogger("rastertotspl")

OPTIONS_HELP = f"""\
Options:
  -o density=<1-15>     Set print density (default: {DEFAULT_DENSITY})
  -o speed=<1-6>        Set print speed (default: {DEFAULT_SPEED})
  -o label-width=XXmm   Set label width in mm
  -o label-height=YYmm  Set label height in mm
  -o gap=N              Set the gap between labels in mm
  -o rotate=90          Rotate output clockwise (0, 90, 180, 270)
  -o ink-polarity=auto  Ink polarity (auto, normal, inverted)
"""


def configure_logging(debug: bool) -> None:
    """Send log records to stderr in the form the CUPS scheduler parses."""
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if debug else logging.INFO,
        format="%(levelname)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rastertotspl",
        description="Convert CUPS raster data to TSPL commands for label printers.",
        epilog=OPTIONS_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("job_id", help="CUPS job ID")
    parser.add_argument("user", help="Submitting user")
    parser.add_argument("title", help="Job title")
    parser.add_argument("copies", help="Number of copies")
    parser.add_argument("options", help="CUPS option string")
    parser.add_argument("file", nargs="?", type=Path, help="Raster file (default: stdin)")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the filter.

    Returns:
        0 on success, 1 on usage errors, unreadable input, or when no page
        of a job could be converted.
    """
    configure_logging(settings.debug)

    args_list = sys.argv[1:] if argv is None else argv
    parser = build_parser()
    if len(args_list) not in (5, 6):
        print(
            "Usage: rastertotspl job-id user title copies options [file]\n\n" + OPTIONS_HELP,
            file=sys.stderr,
        )
        return 1
    args = parser.parse_args(args_list)

    try:
        config = load_config(settings.config_file)
    except (ConfigurationError, OSError) as e:
        logger.error(f"Unable to load configuration: {e}")
        return 1
    params = job_parameters(parse_cups_options(args.options), config.defaults)
    logger.debug(f"Job {args.job_id} '{args.title}' for {args.user}, {args.copies} copies")

    try:
        if args.file is not None:
            source = CupsRasterReader.open(args.file)
        else:
            source = CupsRasterReader(sys.stdin.buffer)
    except OSError as e:
        logger.error(f"Unable to open raster file {args.file}: {e}")
        return 1
    except RasterFormatError as e:
        logger.error(f"Unable to open raster stream: {e}")
        return 1

    converter = TSPLConverter(params, sys.stdout.buffer)
    with source:
        try:
            summary = converter.convert(source)
        except RasterFormatError as e:
            logger.error(f"Raster stream error: {e}")
            return 1

    if summary.failed and not summary.converted:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

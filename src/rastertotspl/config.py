"""Configuration management for rastertotspl."""

import logging
import math
import re
import shlex
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from rastertotspl.exceptions import ConfigurationError
from rastertotspl.models.job import (
    DENSITY_RANGE,
    SPEED_RANGE,
    InkPolarity,
    PrintJobParameters,
    Rotation,
)

logger = logging.getLogger(__name__)

_LEADING_NUMBER = re.compile(r"\s*([-+]?(?:\d+\.?\d*|\.\d+))")
_LEADING_INT = re.compile(r"\s*([-+]?\d+)")


class FilterConfig(BaseModel):
    """Filter configuration loaded from a YAML file."""

    # Job parameters used when the CUPS options do not set them
    defaults: PrintJobParameters = Field(default_factory=PrintJobParameters)
    # Resolution for images that do not store one
    image_dpi: int = Field(default=203, gt=0)


class Settings(BaseSettings):
    """Environment-based settings."""

    model_config = SettingsConfigDict(
        env_prefix="RASTERTOTSPL_",
        env_file=".env",
        extra="ignore",
    )

    config_file: Path = Path("/etc/cups/rastertotspl.yaml")
    debug: bool = False


def load_config(config_path: Path) -> FilterConfig:
    """Load filter configuration from a YAML file.

    Raises:
        ConfigurationError: If the file is not valid YAML or holds invalid values.
    """
    if not config_path.exists():
        return FilterConfig()

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Expected a mapping in {config_path}, got {type(data).__name__}")

    # YAML returns None for empty keys
    if data.get("defaults") is None:
        data.pop("defaults", None)

    try:
        return FilterConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {config_path}: {e}") from e


def parse_cups_options(options: str) -> dict[str, str]:
    """Split a CUPS option string into a name/value mapping.

    Options are separated by whitespace and written as ``name=value``.
    A bare ``name`` means ``true`` and ``noname`` means ``false``. Names
    are case-insensitive; later options replace earlier ones.
    """
    parsed: dict[str, str] = {}
    try:
        tokens = shlex.split(options)
    except ValueError as e:
        logger.warning(f"Unable to parse options '{options}': {e}")
        tokens = options.split()

    for token in tokens:
        if "=" in token:
            name, value = token.split("=", 1)
        elif token.lower().startswith("no") and len(token) > 2:
            name, value = token[2:], "false"
        else:
            name, value = token, "true"
        if name:
            parsed[name.lower()] = value
    return parsed


def leading_number(value: str) -> float:
    """Parse the numeric prefix of ``value`` ("50mm" -> 50.0, "abc" -> 0.0).

    Values too large for a float parse as 0.0.
    """
    match = _LEADING_NUMBER.match(value)
    if not match:
        return 0.0
    number = float(match.group(1))
    return number if math.isfinite(number) else 0.0


def leading_int(value: str) -> int:
    """Parse the integer prefix of ``value`` ("8" -> 8, "2.5" -> 2, "abc" -> 0)."""
    match = _LEADING_INT.match(value)
    if not match:
        return 0
    try:
        return int(match.group(1))
    except ValueError:
        # More digits than int() accepts
        return 0


def _ranged_int(name: str, value: str, bounds: tuple[int, int], default: int) -> int:
    number = leading_int(value)
    if bounds[0] <= number <= bounds[1]:
        return number
    logger.warning(f"Invalid {name} {number}, using default {default}")
    return default


def job_parameters(
    options: dict[str, str],
    defaults: PrintJobParameters | None = None,
) -> PrintJobParameters:
    """Build job parameters from parsed CUPS options.

    Invalid values fall back to ``defaults`` with a warning rather than
    failing the job.

    Args:
        options: Options from ``parse_cups_options``.
        defaults: Parameters to start from.

    Returns:
        Job parameters with the options applied.
    """
    defaults = defaults or PrintJobParameters()
    update: dict[str, Any] = {}

    if "density" in options:
        update["density"] = _ranged_int("density", options["density"], DENSITY_RANGE, defaults.density)

    if "speed" in options:
        update["speed"] = _ranged_int("speed", options["speed"], SPEED_RANGE, defaults.speed)

    if "label-width" in options:
        update["label_width_mm"] = leading_number(options["label-width"])

    if "label-height" in options:
        update["label_height_mm"] = leading_number(options["label-height"])

    if "gap" in options:
        gap = leading_number(options["gap"])
        if gap >= 0:
            update["gap_mm"] = gap
        else:
            logger.warning(f"Invalid gap {gap}, using default {defaults.gap_mm:g}")

    if "rotate" in options:
        degrees = leading_int(options["rotate"]) % 360
        try:
            update["rotation"] = Rotation(degrees)
        except ValueError:
            logger.warning(f"Invalid rotation {degrees}, using default {int(defaults.rotation)}")

    if "ink-polarity" in options:
        polarity = options["ink-polarity"].lower()
        try:
            update["ink_polarity"] = InkPolarity(polarity)
        except ValueError:
            logger.warning(f"Invalid ink polarity '{polarity}', using default {defaults.ink_polarity}")

    params = defaults.model_copy(update=update)
    logger.debug(
        f"Job parameters: density={params.density} speed={params.speed} gap={params.gap_mm:g}mm"
        f" label={params.label_width_mm:g}x{params.label_height_mm:g}mm rotation={int(params.rotation)}"
        f" polarity={params.ink_polarity}"
    )
    return params


# Global settings instance
settings = Settings()

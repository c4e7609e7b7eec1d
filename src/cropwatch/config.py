"""
Settings

Runtime settings for the crop insurance swarm, loaded from YAML.

Example ``cropwatch.yml``::

    farm_count: 50
    series_days: 60
    seed: 42
    default_officer: "Taluka Officer"
    log_level: DEBUG
"""

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from .errors import ValidationError
from .models import DisasterType

logger = logging.getLogger(__name__)

# Survey region near Kolhapur, Maharashtra, as (lat, lng) in boundary order.
DEFAULT_BOUNDARY: Tuple[Tuple[float, float], ...] = (
    (16.713014674656513, 74.19346219529133),
    (16.71129990029675, 74.19827199353445),
    (16.705647478823355, 74.19729933576573),
    (16.707171881293117, 74.19143287244015),
)

LOG_FORMATS = ("json", "text")


@dataclass
class Settings:
    """Parsed cropwatch configuration."""

    boundary: List[Tuple[float, float]] = field(default_factory=lambda: list(DEFAULT_BOUNDARY))
    farm_count: Optional[int] = None  # None uses the seed roster
    min_distance: float = 0.0005
    attempts_per_farm: int = 150
    series_days: int = 60
    noise_std: float = 0.01
    seasonal_amplitude: float = 0.015
    seed: Optional[int] = None
    default_officer: str = "System Officer"
    default_disaster_type: str = "flood"
    log_level: str = "INFO"
    log_format: str = "json"


_NUMERIC = {
    "farm_count": int,
    "min_distance": float,
    "attempts_per_farm": int,
    "series_days": int,
    "noise_std": float,
    "seasonal_amplitude": float,
    "seed": int,
}


def _coerce(name: str, value: Any) -> Any:
    if name in _NUMERIC:
        if value is None and name in ("farm_count", "seed"):
            return None
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError(f"Setting '{name}' must be a number, got {value!r}", field=name)
        if _NUMERIC[name] is int and not float(value).is_integer():
            raise ValidationError(f"Setting '{name}' must be an integer, got {value!r}", field=name)
        return _NUMERIC[name](value)

    if name == "boundary":
        if not isinstance(value, list) or len(value) < 3:
            raise ValidationError("Setting 'boundary' must list at least 3 points", field=name)
        try:
            return [(float(lat), float(lng)) for lat, lng in value]
        except (TypeError, ValueError):
            raise ValidationError("Setting 'boundary' must hold [lat, lng] pairs", field=name)

    if not isinstance(value, str):
        raise ValidationError(f"Setting '{name}' must be a string, got {value!r}", field=name)
    if name == "default_disaster_type":
        try:
            DisasterType(value)
        except ValueError:
            raise ValidationError(f"Unknown disaster type: {value!r}", field=name)
    if name == "log_format" and value not in LOG_FORMATS:
        raise ValidationError(f"log_format must be one of {LOG_FORMATS}", field=name)
    if name == "log_level":
        value = value.upper()
        if not isinstance(logging.getLevelName(value), int):
            raise ValidationError(f"Unknown log level: {value!r}", field=name)
    return value


def parse_config(yaml_content: Optional[str] = None) -> Settings:
    """Parse YAML settings into a Settings object.

    Returns defaults when *yaml_content* is ``None``, invalid YAML, or not a
    mapping. Unknown keys are ignored.

    Raises:
        ValidationError: If a known key has a value of the wrong type
    """
    if yaml_content is None:
        return Settings()

    try:
        data = yaml.safe_load(yaml_content)
    except yaml.YAMLError as e:
        logger.warning("Ignoring invalid settings YAML: %s", e)
        return Settings()

    if not isinstance(data, dict):
        return Settings()

    known = {f.name for f in fields(Settings)}
    values: Dict[str, Any] = {}
    for key, value in data.items():
        if key not in known:
            logger.debug("Ignoring unknown setting %r", key)
            continue
        values[key] = _coerce(key, value)
    return Settings(**values)


def load_config(path: Union[str, Path]) -> Settings:
    """Read settings from a YAML file; a missing file yields defaults."""
    path = Path(path)
    if not path.exists():
        logger.info("No settings file at %s, using defaults", path)
        return Settings()
    return parse_config(path.read_text(encoding="utf-8"))

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import AppConfig, ColumnConfig, LookupConfig, OutputConfig

"""Config loader.

Responsibilities:
- Load the YAML config (config/distance.yml by default)
- Validate it against the bundled JSON schema
- Apply defaults for every omitted key
"""

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "load_config",
]

DEFAULT_CONFIG_PATH = Path("config/distance.yml")
SCHEMA_PATH = Path(__file__).with_name("config_schema.json")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against JSON schema.

    Raises:
        ConfigError: schema file unreadable or config violates the schema
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path | None = None) -> AppConfig:
    """Load and validate the config file.

    Args:
        path: Explicit config path. None means the default path, which may be
            absent (built-in defaults are used then).

    Raises:
        ConfigError: explicit file missing, invalid YAML or schema violation
    """
    if path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return AppConfig()
        path = DEFAULT_CONFIG_PATH
    elif not path.exists():
        raise ConfigError(f"config file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config validation failed: top level must be a mapping")

    _validate_config_schema(data)

    defaults = AppConfig()
    columns_raw = data.get("columns", {})
    output_raw = data.get("output", {})
    lookup = LookupConfig(
        model=data.get("model", defaults.lookup.model),
        country=data.get("country", defaults.lookup.country),
        timeout_seconds=float(data.get("timeout_seconds", defaults.lookup.timeout_seconds)),
    )
    columns = ColumnConfig(
        origin=columns_raw.get("origin", defaults.columns.origin),
        destination=columns_raw.get("destination", defaults.columns.destination),
    )
    output = OutputConfig(
        results_file=output_raw.get("results_file", defaults.output.results_file),
        logs_dir=output_raw.get("logs_dir", defaults.output.logs_dir),
    )
    return AppConfig(lookup=lookup, columns=columns, output=output)

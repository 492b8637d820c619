"""
Export configuration.

An export is configured by a small YAML file:

    target: r                 # r | python
    output_dir: out
    table_format: inline      # inline | csv
    strict_symbols: true      # false: unknown identifiers pass through with a warning
    max_depth: 100
    person_level: false

Every key is optional. Command-line flags override file values.
"""

import logging
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

import yaml

from dmel.backends import PROFILES, TableFormat
from dmel.errors import ConfigError
from dmel.translator import DEFAULT_MAX_DEPTH

logger = logging.getLogger(__name__)

# Each nesting level costs several interpreter frames
MAX_DEPTH_LIMIT = 150


@dataclass(frozen=True)
class ExportConfig:
    """Settings for one export session."""

    target: str = "r"
    output_dir: str = "."
    table_format: TableFormat = TableFormat.INLINE
    strict_symbols: bool = True
    max_depth: int = DEFAULT_MAX_DEPTH
    person_level: bool = False

    def __post_init__(self):
        target = str(self.target).lower()
        if target not in PROFILES:
            raise ConfigError(f"Unknown target '{self.target}' (expected one of: {', '.join(PROFILES)})")
        object.__setattr__(self, "target", target)

        try:
            object.__setattr__(self, "table_format", TableFormat(self.table_format))
        except ValueError as e:
            raise ConfigError(f"Unknown table_format '{self.table_format}' (expected inline or csv)") from e

        if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int):
            raise ConfigError(f"max_depth must be an integer, got {self.max_depth!r}")
        if not 1 <= self.max_depth <= MAX_DEPTH_LIMIT:
            raise ConfigError(f"max_depth must be between 1 and {MAX_DEPTH_LIMIT}")

        for flag in ("strict_symbols", "person_level"):
            if not isinstance(getattr(self, flag), bool):
                raise ConfigError(f"{flag} must be true or false")

    def with_overrides(self, **overrides: Any) -> "ExportConfig":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self


def config_from_dict(d: Optional[Dict[str, Any]]) -> ExportConfig:
    d = d or {}
    if not isinstance(d, dict):
        raise ConfigError("Export configuration must be a mapping")
    known = {f.name for f in fields(ExportConfig)}
    unknown = sorted(set(d) - known)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {unknown}")
    return ExportConfig(**d)


def load_config(path: str) -> ExportConfig:
    """
    Load an ExportConfig from a YAML file.

    Raises:
        ConfigError: unreadable file, invalid YAML or invalid values
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read configuration file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    config = config_from_dict(data)
    logger.debug("Loaded export configuration from %s: %s", path, config)
    return config


__all__ = ["ExportConfig", "config_from_dict", "load_config", "MAX_DEPTH_LIMIT"]

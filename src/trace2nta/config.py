"""
Run configuration.

Settings can come from a YAML file; command-line flags override them.

Example file:
    initial_prefix: Init
    location_prefix: ""
    template_name: Controller
    output_dir: out
    write_model_dump: true
    log_level: DEBUG
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

import yaml

from trace2nta.errors import ConfigError

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_OPTIONAL_TEXT = ("template_name", "output_dir")


@dataclass
class TransformConfig:
    """
    Options of one transformation run.

    Properties:
        location_prefix: Prefix of locations created for statements;
            empty means "Location"
        initial_prefix: Prefix of the initial location
        template_name: Template name; defaults to the trace name
        output_dir: Directory for the output; defaults to the trace's
        write_model_dump: Also save the YAML model dump
        log_level: Logging level name used by the CLI
    """

    location_prefix: str = ""
    initial_prefix: str = "Init"
    template_name: Optional[str] = None
    output_dir: Optional[str] = None
    write_model_dump: bool = False
    log_level: str = "INFO"

    def merged(self, **overrides: Any) -> "TransformConfig":
        """Return a copy with every override that is not None applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)


def config_from_dict(d: Optional[Dict[str, Any]]) -> TransformConfig:
    if d is None:
        return TransformConfig()
    if not isinstance(d, dict):
        raise ConfigError(f"Configuration must be a mapping, got {type(d).__name__}")
    known = {f.name for f in fields(TransformConfig)}
    unknown = sorted(set(d) - known)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {unknown}")

    for key, value in d.items():
        if key == "write_model_dump":
            if not isinstance(value, bool):
                raise ConfigError(f"'{key}' must be true or false, got {value!r}")
        elif value is None and key in _OPTIONAL_TEXT:
            continue
        elif not isinstance(value, str):
            raise ConfigError(f"'{key}' must be text, got {value!r}")

    if "log_level" in d:
        level = d["log_level"].upper()
        if level not in LOG_LEVELS:
            raise ConfigError(f"'log_level' must be one of {LOG_LEVELS}, got {d['log_level']!r}")
        d = dict(d, log_level=level)
    return TransformConfig(**d)


def load_config(path: str) -> TransformConfig:
    """
    Load a TransformConfig from a YAML file.

    Raises:
        ConfigError: If the file is missing, unreadable or invalid
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigError(f"Configuration file not found: {path}")
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid configuration file {path}: {e}")
    return config_from_dict(data)

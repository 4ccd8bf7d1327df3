"""
Session configuration, read from a YAML file.

Example::

    entry_point: main
    shadowing: first        # or 'last'
    keep_last_good: false
    implicit_receiver: true
    log_level: INFO
    log_file: logs/replscope.log
    export_format: yaml
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from replscope.scope_datatypes import ConfigError

_SHADOWING = ('first', 'last')
_LOG_LEVELS = ('TRACE', 'DEBUG', 'INFO', 'SUCCESS', 'WARNING', 'ERROR', 'CRITICAL')
_EXPORT_FORMATS = ('json', 'yaml', 'toml', 'xml')


@dataclass
class SessionConfig:
    entry_point: str = "main"
    shadowing: str = "first"
    keep_last_good: bool = False
    implicit_receiver: bool = True
    log_level: str = "INFO"
    log_file: Optional[str] = None
    log_rotation: str = "1 day"
    log_retention: str = "30 days"
    export_format: str = "yaml"

    def __post_init__(self):
        if self.shadowing not in _SHADOWING:
            raise ConfigError(f"shadowing must be one of {_SHADOWING}, not {self.shadowing!r}")
        self.log_level = str(self.log_level).upper()
        if self.log_level not in _LOG_LEVELS:
            raise ConfigError(f"Unknown log_level {self.log_level!r}")
        if self.export_format not in _EXPORT_FORMATS:
            raise ConfigError(f"export_format must be one of {_EXPORT_FORMATS}, not {self.export_format!r}")
        if not isinstance(self.entry_point, str) or not self.entry_point:
            raise ConfigError("entry_point must be a non-empty string")
        for name in ('keep_last_good', 'implicit_receiver'):
            if not isinstance(getattr(self, name), bool):
                raise ConfigError(f"{name} must be true or false")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SessionConfig':
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**data)


def load_config(path: Optional[str] = None) -> SessionConfig:
    """Load a SessionConfig from `path`; defaults when no path is given."""
    if path is None:
        return SessionConfig()
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigError(f"Configuration file not found: {path}") from None
    except OSError as e:
        raise ConfigError(f"Cannot read configuration file {path}: {e}") from e
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if data is None:
        return SessionConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping, not {type(data).__name__}")
    return SessionConfig.from_dict(data)

"""YAML configuration for the course planner.

Example ``config/planner_config.yaml``::

    catalog_file: ../data/infile.txt
    strict_load: true
    key_format:
      pattern: "^[A-Za-z]{2,4}[0-9]{3,}$"
      max_length: 20
      extra_patterns: []
    logging:
      level: WARNING
      log_file: null
    display:
      color: true
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml

from .errors import ConfigError
from .key_format import DEFAULT_KEY_PATTERN, DEFAULT_MAX_KEY_LENGTH, KeyFormat

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "planner_config.yaml"
DEFAULT_CATALOG_FILE = "data/infile.txt"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_TOP_LEVEL_KEYS = {"catalog_file", "strict_load", "key_format", "logging", "display"}


@dataclass
class KeyFormatConfig:
    pattern: str = DEFAULT_KEY_PATTERN
    max_length: int = DEFAULT_MAX_KEY_LENGTH
    extra_patterns: List[str] = field(default_factory=list)


@dataclass
class LoggingConfig:
    level: str = "WARNING"
    log_file: Optional[Path] = None


@dataclass
class PlannerConfig:
    catalog_file: Path = Path(DEFAULT_CATALOG_FILE)
    strict_load: bool = True
    key_format: KeyFormatConfig = field(default_factory=KeyFormatConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    color: bool = True
    loaded_from: Optional[Path] = None

    def build_key_format(self) -> KeyFormat:
        primary = KeyFormat(self.key_format.pattern, self.key_format.max_length)
        extras = [KeyFormat(p, self.key_format.max_length) for p in self.key_format.extra_patterns]
        if extras:
            return KeyFormat.any_of(primary, *extras)
        return primary


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = raw.get(name) or {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"'{name}' must be a mapping, got {type(value).__name__}")
    return value


def _check_pattern(pattern: Any, name: str) -> str:
    if not isinstance(pattern, str) or not pattern:
        raise ConfigError(f"{name} must be a non-empty string")
    try:
        re.compile(pattern)
    except re.error as e:
        raise ConfigError(f"{name} is not a valid regular expression: {e}")
    return pattern


def config_from_dict(raw: Mapping[str, Any], base_dir: Optional[Path] = None) -> PlannerConfig:
    """Build a ``PlannerConfig`` from a parsed YAML mapping.

    Relative ``catalog_file`` and ``logging.log_file`` paths are resolved
    against ``base_dir`` (the directory holding the config file).
    """
    unknown = set(raw) - _TOP_LEVEL_KEYS
    if unknown:
        raise ConfigError(f"Unknown configuration key(s): {', '.join(sorted(unknown))}")

    def resolve(value: Any, name: str) -> Path:
        if not isinstance(value, (str, Path)) or not str(value):
            raise ConfigError(f"{name} must be a path string")
        path = Path(value).expanduser()
        if base_dir is not None and not path.is_absolute():
            path = (base_dir / path).resolve()
        return path

    config = PlannerConfig()
    if "catalog_file" in raw:
        config.catalog_file = resolve(raw["catalog_file"], "catalog_file")
    elif base_dir is not None:
        config.catalog_file = base_dir.parent / DEFAULT_CATALOG_FILE

    strict = raw.get("strict_load", True)
    if not isinstance(strict, bool):
        raise ConfigError("strict_load must be true or false")
    config.strict_load = strict

    key_section = _section(raw, "key_format")
    max_length = key_section.get("max_length", DEFAULT_MAX_KEY_LENGTH)
    if not isinstance(max_length, int) or isinstance(max_length, bool) or max_length <= 0:
        raise ConfigError("key_format.max_length must be a positive integer")
    extra = key_section.get("extra_patterns") or []
    if not isinstance(extra, list):
        raise ConfigError("key_format.extra_patterns must be a list")
    config.key_format = KeyFormatConfig(
        pattern=_check_pattern(key_section.get("pattern", DEFAULT_KEY_PATTERN), "key_format.pattern"),
        max_length=max_length,
        extra_patterns=[_check_pattern(p, "key_format.extra_patterns[]") for p in extra],
    )

    log_section = _section(raw, "logging")
    level = str(log_section.get("level", "WARNING")).upper()
    if level not in _LOG_LEVELS:
        raise ConfigError(f"logging.level must be one of {', '.join(_LOG_LEVELS)}")
    log_file = log_section.get("log_file")
    config.logging = LoggingConfig(
        level=level,
        log_file=resolve(log_file, "logging.log_file") if log_file else None,
    )

    color = _section(raw, "display").get("color", True)
    if not isinstance(color, bool):
        raise ConfigError("display.color must be true or false")
    config.color = color

    return config


def load_config(path: Optional[Union[str, Path]] = None) -> PlannerConfig:
    """Load the planner configuration.

    With no ``path`` the default ``config/planner_config.yaml`` is read if it
    exists, otherwise built-in defaults are returned. An explicit ``path``
    must exist.
    """
    explicit = path is not None
    config_path = Path(path) if explicit else DEFAULT_CONFIG_PATH

    if not config_path.exists():
        if explicit:
            raise ConfigError(f"Configuration file not found at {config_path}")
        logger.debug("No configuration file at %s; using defaults", config_path)
        return PlannerConfig()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            raw: Dict[str, Any] = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse {config_path}: {e}")

    if not isinstance(raw, Mapping):
        raise ConfigError(f"{config_path} must contain a mapping at the top level")

    config = config_from_dict(raw, base_dir=config_path.resolve().parent)
    config.loaded_from = config_path
    logger.debug("Loaded configuration from %s", config_path)
    return config

"""
Configuration
-------------
Process-wide settings, read once at startup and never mutated after.

Loads an optional YAML file, then applies MUSIC_MCP_* environment
variable overrides. Bad values never crash loading: the default is kept
and a human-readable issue is recorded for validate_config().
"""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional
import logging
import os

import yaml

from bridge.scripts import BUNDLED_SCRIPTS_DIR

ENV_PREFIX = "MUSIC_MCP_"
LOG_LEVELS = ("debug", "info", "warn", "warning", "error")
ABSOLUTE_SEARCH_CAP = 100
POSITIVE_FIELDS = ("max_search_results", "timeout_seconds")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _default_log_file() -> str:
    return str(Path.home() / "Library" / "Logs" / "music-mcp.log")


@dataclass(frozen=True)
class MusicConfig:
    """Server settings with documented defaults."""
    log_level: str = "info"
    log_file: str = field(default_factory=_default_log_file)
    console_logging: bool = True
    file_logging: bool = False
    max_search_results: int = 50
    timeout_seconds: int = 30
    interpreter: str = "osascript"
    scripts_dir: str = str(BUNDLED_SCRIPTS_DIR)
    enable_queue_tools: bool = True
    load_issues: tuple = ()

    def __post_init__(self):
        """Replace non-positive limits with their defaults and record why."""
        issues = []
        for f in fields(self):
            if f.name in POSITIVE_FIELDS and getattr(self, f.name) < 1:
                issues.append(f"{ENV_PREFIX}{f.name.upper()} must be positive")
                object.__setattr__(self, f.name, f.default)
        if issues:
            object.__setattr__(self, "load_issues", tuple(self.load_issues) + tuple(issues))

    @property
    def timeout_ms(self) -> int:
        return self.timeout_seconds * 1000

    @property
    def logging_level(self) -> int:
        """Level for the stdlib logging module."""
        name = self.log_level.upper()
        if name == "WARN":
            name = "WARNING"
        return getattr(logging, name, logging.INFO)

    @property
    def log_level_name(self) -> str:
        """Canonical lowercase level name ("warn" becomes "warning")."""
        return logging.getLevelName(self.logging_level).lower()

    def effective_search_limit(self, requested: Optional[int] = None) -> int:
        """min(requested, configured cap, absolute cap); the cap is also the default."""
        cap = min(self.max_search_results, ABSOLUTE_SEARCH_CAP)
        if requested is None:
            return cap
        return max(1, min(int(requested), cap))

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name != "load_issues"}


def _coerce(name: str, raw: Any, default: Any, issues: List[str]) -> Any:
    """Convert a raw file/env value to the type of the field default."""
    if isinstance(default, bool):
        if isinstance(raw, bool):
            return raw
        text = str(raw).strip().lower()
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
        issues.append(f"{ENV_PREFIX}{name.upper()} must be a boolean (got {raw!r})")
        return default

    if isinstance(default, int):
        try:
            return int(str(raw).strip())
        except ValueError:
            issues.append(f"{ENV_PREFIX}{name.upper()} must be an integer (got {raw!r})")
            return default

    value = str(raw)
    return value.lower() if name == "log_level" else value


def load_config(
    path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> MusicConfig:
    """
    Build the configuration.

    Args:
        path: Optional YAML file; falls back to $MUSIC_MCP_CONFIG
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Frozen MusicConfig; problems are listed in load_issues
    """
    env = os.environ if environ is None else environ
    logger = logging.getLogger("music_mcp.infra.config")
    issues: List[str] = []
    raw: Dict[str, Any] = {}

    config_path = path or env.get(f"{ENV_PREFIX}CONFIG")
    if config_path:
        file_path = Path(config_path).expanduser()
        if file_path.exists():
            try:
                with open(file_path, "r") as f:
                    loaded = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                issues.append(f"Config file {file_path} is not valid YAML: {e}")
                loaded = {}
            if isinstance(loaded, dict):
                raw.update(loaded)
                logger.info(f"Loaded config from {file_path}")
            else:
                issues.append(f"Config file {file_path} must contain a mapping")
        else:
            issues.append(f"Config file not found: {file_path}")

    defaults = MusicConfig()
    known = {f.name for f in fields(MusicConfig) if f.name != "load_issues"}

    for key in list(raw):
        if key not in known:
            issues.append(f"Unknown config key: {key}")
            raw.pop(key)

    for name in known:
        env_value = env.get(f"{ENV_PREFIX}{name.upper()}")
        if env_value is not None:
            raw[name] = env_value

    values = {
        name: _coerce(name, value, getattr(defaults, name), issues)
        for name, value in raw.items()
    }
    if "log_file" in values:
        values["log_file"] = str(Path(values["log_file"]).expanduser())

    return MusicConfig(load_issues=tuple(issues), **values)


def validate_config(config: MusicConfig) -> List[str]:
    """Return human-readable configuration issues (empty if valid)."""
    issues = list(config.load_issues)

    if config.log_level not in LOG_LEVELS:
        issues.append(f"{ENV_PREFIX}LOG_LEVEL must be one of: debug, info, warn, error")

    if not Path(config.scripts_dir).is_dir():
        issues.append(f"Scripts directory not found: {config.scripts_dir}")

    return issues

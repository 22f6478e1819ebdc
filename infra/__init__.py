# Infrastructure module - Configuration, Logging, Health, and Transports
# Transports (server, service_bus) import the tools package; import them directly

from .config import MusicConfig, load_config, validate_config
from .health import HealthMonitor, HealthStatus, ScriptHealth
from .logging import (
    get_logger, configure_logging, CallContext,
    log_call_end, get_call_id, generate_call_id, flush_logging
)
from .version import get_version

__all__ = [
    # Config
    "MusicConfig",
    "load_config",
    "validate_config",
    # Health
    "HealthMonitor",
    "HealthStatus",
    "ScriptHealth",
    # Logging
    "get_logger",
    "configure_logging",
    "CallContext",
    "log_call_end",
    "get_call_id",
    "generate_call_id",
    "flush_logging",
    # Version
    "get_version",
]

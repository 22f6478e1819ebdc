"""
Centralized Logging
-------------------
Structured logging with call_id propagation for per-call traceability.

Design:
- Every tool call gets a unique call_id
- call_id propagates through: Dispatcher -> Handler -> ScriptRunner
- Console output goes to stderr through rich; stdout carries the MCP protocol
- Optional JSON file output with size-based rotation
- Severity discipline: INFO=call boundaries, WARNING=rejected or failed
  script, ERROR=call aborted

Usage:
    from infra.logging import get_logger, CallContext, log_call_end

    logger = get_logger("tools.playback")

    with CallContext() as call_id:
        logger.info("Running play")
        log_call_end(call_id, "execute_music_command", success=True, duration_ms=42.0)
"""

from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional
import contextvars
import json
import logging
import uuid

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "music_mcp"

# Context variable for call_id - async-safe, each task sees its own
_call_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "call_id", default=None
)


def generate_call_id() -> str:
    return f"call_{uuid.uuid4().hex[:12]}"


def get_call_id() -> Optional[str]:
    """Get the current call ID from context."""
    return _call_id_var.get()


class CallContext:
    """
    Context manager scoping log records to one tool call.

    Usage:
        with CallContext() as call_id:
            logger.info("Dispatching...")
    """

    def __init__(self, call_id: Optional[str] = None):
        self._call_id = call_id or generate_call_id()
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> str:
        self._token = _call_id_var.set(self._call_id)
        return self._call_id

    def __exit__(self, *args) -> None:
        if self._token is not None:
            _call_id_var.reset(self._token)


class CallIdFilter(logging.Filter):
    """Adds call_id to every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "call_id", None) is None:
            record.call_id = get_call_id() or "-"
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line for the log file."""

    EXTRA_KEYS = ("tool_name", "script", "duration_ms", "success", "error", "details")

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "call_id": getattr(record, "call_id", "-"),
        }

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        for key in self.EXTRA_KEYS:
            if hasattr(record, key):
                entry[key] = getattr(record, key)

        return json.dumps(entry, default=str)


class CallIdRichHandler(RichHandler):
    """RichHandler that prefixes the message with the active call_id."""

    def render_message(self, record: logging.LogRecord, message: str):
        call_id = getattr(record, "call_id", "-")
        if call_id != "-":
            message = f"[{call_id}] {message}"
        return super().render_message(record, message)


# Module state, reset by configure_logging
_log_file_path: Optional[Path] = None
_logger_status: str = "not configured"


def configure_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    console: bool = True,
    file: bool = False,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 3,
) -> None:
    """
    Configure the music_mcp logger tree. Safe to call again; handlers
    from a previous call are replaced.

    Args:
        level: Logging level
        log_file: JSON log file path (used when file=True)
        console: Enable stderr output
        file: Enable file output
    """
    global _log_file_path, _logger_status

    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.propagate = False

    call_filter = CallIdFilter()
    _log_file_path = None
    _logger_status = "console" if console else "disabled"

    if console:
        handler = CallIdRichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setLevel(level)
        handler.addFilter(call_filter)
        root_logger.addHandler(handler)

    if file and log_file:
        path = Path(log_file).expanduser()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                str(path), maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
            )
        except OSError as e:
            _logger_status = f"file logging unavailable: {e}"
            root_logger.warning(f"Could not open log file {path}: {e}")
        else:
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(JSONFormatter())
            file_handler.addFilter(call_filter)
            root_logger.addHandler(file_handler)
            _log_file_path = path
            _logger_status = "console+file" if console else "file"

    if not root_logger.handlers:
        root_logger.addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the music_mcp namespace."""
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def get_log_file_path() -> Optional[Path]:
    return _log_file_path


def get_logger_status() -> str:
    return _logger_status


def log_call_end(
    call_id: str,
    tool_name: str,
    success: bool,
    duration_ms: float,
    error: Optional[str] = None,
) -> None:
    """
    Log the CALL_END boundary event for a tool call.

    Args:
        call_id: The call being completed
        tool_name: Tool that was invoked
        success: Envelope success flag
        duration_ms: Wall time from receipt to envelope
        error: Envelope error tag when unsuccessful
    """
    logger = get_logger("dispatch")
    extra = {
        "call_id": call_id,
        "tool_name": tool_name,
        "success": success,
        "duration_ms": round(duration_ms, 2),
    }

    if success:
        logger.info(f"CALL_END: {tool_name} success=True ({duration_ms:.0f}ms)", extra=extra)
    else:
        extra["error"] = error or "Unknown error"
        logger.warning(f"CALL_END: {tool_name} success=False error={error or 'Unknown'}", extra=extra)


def flush_logging() -> None:
    """Flush every handler; called on shutdown."""
    for handler in logging.getLogger(ROOT_LOGGER).handlers:
        handler.flush()

"""
Error Handling Module
---------------------
Typed errors with classification for every tool call.

Every failure ends up as a ResponseEnvelope with success=False.
Nothing in here is allowed to take the server process down.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Dict, List, Optional
import logging
import traceback

from .envelope import ResponseEnvelope


class ErrorCategory(Enum):
    """Categories of errors for logging and reporting decisions."""
    VALIDATION_ERROR = auto()        # Arguments violate the declared schema
    MISSING_PARAMETER = auto()       # Handler-level precondition unmet
    UNKNOWN_TOOL = auto()            # Tool name not in the registry
    EXTERNAL_TIMEOUT = auto()        # Script process killed after its timeout
    EXTERNAL_NON_ZERO_EXIT = auto()  # Script process exited with a failure status
    EXTERNAL_SPAWN = auto()          # Script process could not be started
    SCRIPT_ERROR = auto()            # Script reported failure via the error marker
    PARSE_ERROR = auto()             # Output was not JSON (non-fatal)
    INTERNAL_ERROR = auto()          # Unexpected exception inside the server


# Stable error tags. Clients match on these strings.
INVALID_VOLUME_RANGE = "Invalid volume range"
INVALID_RATING_RANGE = "Invalid rating range"
EMPTY_QUERY = "Empty query"
MISSING_PLAYLIST_NAME = "Missing playlist name"
MISSING_REQUIRED_PARAMETERS = "Missing required parameters"
MISSING_TRACK_SEARCH_TERM = "Missing track search term"
VALIDATION_FAILED = "Validation failed"
UNKNOWN_TOOL = "Unknown tool"


class MusicMCPError(Exception):
    """Base exception for errors raised inside the server."""

    category: ErrorCategory = ErrorCategory.INTERNAL_ERROR

    def __init__(self, message: str, tag: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.tag = tag or message


class ValidationError(MusicMCPError):
    """Raised when arguments do not match a tool's declared schema."""

    category = ErrorCategory.VALIDATION_ERROR


class MissingParameterError(MusicMCPError):
    """Raised when a handler precondition is not met."""

    category = ErrorCategory.MISSING_PARAMETER


@dataclass
class ToolError:
    """
    Structured error with metadata.

    Converted into exactly one failure envelope.
    """
    category: ErrorCategory
    message: str
    tag: str
    tool_name: str = ""
    details: Optional[Dict[str, Any]] = None
    timestamp: datetime = field(default_factory=datetime.now)
    stack_trace: Optional[str] = None

    @classmethod
    def from_exception(
        cls,
        exception: Exception,
        tool_name: str = "",
        details: Optional[Dict] = None
    ) -> "ToolError":
        """Create error from an exception."""
        if isinstance(exception, MusicMCPError):
            return cls(
                category=exception.category,
                message=exception.message,
                tag=exception.tag,
                tool_name=tool_name,
                details=details,
            )
        return cls(
            category=ErrorCategory.INTERNAL_ERROR,
            message=f"Tool execution failed: {exception}",
            tag=f"Tool execution failed: {exception}",
            tool_name=tool_name,
            details=details,
            stack_trace=traceback.format_exc(),
        )

    def to_envelope(self) -> ResponseEnvelope:
        return ResponseEnvelope.fail(self.message, self.tag)

    def __repr__(self) -> str:
        return f"ToolError({self.category.name}: {self.message})"


class ErrorHandler:
    """
    Central error logger.

    Keeps a bounded history so the diagnostics tool can report
    error counts per category.
    """

    LEVELS: Dict[ErrorCategory, int] = {
        ErrorCategory.VALIDATION_ERROR: logging.WARNING,
        ErrorCategory.MISSING_PARAMETER: logging.WARNING,
        ErrorCategory.UNKNOWN_TOOL: logging.WARNING,
        ErrorCategory.PARSE_ERROR: logging.DEBUG,
        ErrorCategory.SCRIPT_ERROR: logging.ERROR,
        ErrorCategory.EXTERNAL_TIMEOUT: logging.ERROR,
        ErrorCategory.EXTERNAL_NON_ZERO_EXIT: logging.ERROR,
        ErrorCategory.EXTERNAL_SPAWN: logging.ERROR,
        ErrorCategory.INTERNAL_ERROR: logging.CRITICAL,
    }

    def __init__(self, max_history: int = 100):
        self._logger = logging.getLogger("music_mcp.errors")
        self._error_history: List[ToolError] = []
        self._max_history = max_history

    def handle(self, error: ToolError) -> ResponseEnvelope:
        """Log an error and return its envelope."""
        self._log_error(error)

        self._error_history.append(error)
        if len(self._error_history) > self._max_history:
            self._error_history.pop(0)

        return error.to_envelope()

    def _log_error(self, error: ToolError) -> None:
        level = self.LEVELS.get(error.category, logging.ERROR)

        self._logger.log(
            level,
            f"{error.category.name} in {error.tool_name or '-'}: {error.message}",
            extra={"tool_name": error.tool_name, "details": error.details},
        )

        if error.stack_trace and level >= logging.ERROR:
            self._logger.debug(f"Stack trace:\n{error.stack_trace}")

    def get_error_stats(self) -> Dict[str, int]:
        """Get error counts per category."""
        stats: Dict[str, int] = {}
        for error in self._error_history:
            key = error.category.name
            stats[key] = stats.get(key, 0) + 1
        return stats

    def clear_history(self) -> None:
        self._error_history.clear()


# Convenience functions

def create_validation_error(message: str, tool_name: str = "", tag: Optional[str] = None) -> ToolError:
    """Create a schema validation error."""
    return ToolError(
        category=ErrorCategory.VALIDATION_ERROR,
        message=message,
        tag=tag or VALIDATION_FAILED,
        tool_name=tool_name,
    )


def create_unknown_tool_error(tool_name: str) -> ToolError:
    """Create an unknown tool error."""
    return ToolError(
        category=ErrorCategory.UNKNOWN_TOOL,
        message=f"Unknown tool: {tool_name}",
        tag=UNKNOWN_TOOL,
        tool_name=tool_name,
    )

# Core module - envelope, error taxonomy and request lifecycle
# Every tool call ends in exactly one ResponseEnvelope

from .envelope import ResponseEnvelope, encode, to_content
from .errors import (
    ErrorCategory, ErrorHandler, ToolError,
    MusicMCPError, ValidationError, MissingParameterError,
)
from .state_machine import RequestState, RequestStateMachine, StateTransition

__all__ = [
    "ResponseEnvelope", "encode", "to_content",
    "ErrorCategory", "ErrorHandler", "ToolError",
    "MusicMCPError", "ValidationError", "MissingParameterError",
    "RequestState", "RequestStateMachine", "StateTransition",
]

# Tools module - registry, typed inputs, handlers and dispatcher
# Each tool: name, JSON schema, handler; every call ends in one envelope
# The registry is the firewall between the calling agent and the automation layer

from .registry import ToolRegistry, ToolDescriptor, ToolSchema, ToolParameter, ParameterType
from .definitions import build_registry, build_descriptors
from .inputs import parse_tool_input
from .base import ToolHandler, ScriptOutput, ERROR_MARKER
from .dispatcher import Dispatcher, create_dispatcher

__all__ = [
    "ToolRegistry",
    "ToolDescriptor",
    "ToolSchema",
    "ToolParameter",
    "ParameterType",
    "build_registry",
    "build_descriptors",
    "parse_tool_input",
    "ToolHandler",
    "ScriptOutput",
    "ERROR_MARKER",
    "Dispatcher",
    "create_dispatcher",
]

"""
Tool Registry
-------------
Declarative, JSON-schema-exportable tool definitions.

The registry is built once at startup and never mutated afterwards.
It is the firewall between the calling agent and the automation layer:
every call is checked here before a handler sees it.

Exit Criterion: A malformed call is rejected without touching a handler.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple
import logging

from core.errors import ToolError, create_unknown_tool_error, create_validation_error


class ParameterType(str, Enum):
    """Supported parameter types."""
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"


_PYTHON_TYPES = {
    ParameterType.STRING: str,
    ParameterType.INTEGER: int,
    ParameterType.NUMBER: (int, float),
    ParameterType.BOOLEAN: bool,
}


@dataclass(frozen=True)
class ToolParameter:
    """Definition of a tool parameter."""
    name: str
    type: ParameterType
    description: str
    required: bool = False
    default: Optional[Any] = None
    enum: Optional[Tuple[Any, ...]] = None  # Allowed values
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    range_error: Optional[str] = None  # Error tag for an out-of-range value

    def to_json_schema(self) -> Dict:
        """Convert to JSON Schema format."""
        schema = {
            "type": self.type.value,
            "description": self.description
        }

        if self.enum:
            schema["enum"] = list(self.enum)
        if self.min_value is not None:
            schema["minimum"] = self.min_value
        if self.max_value is not None:
            schema["maximum"] = self.max_value
        if self.default is not None:
            schema["default"] = self.default

        return schema

    def check(self, value: Any) -> Optional[Tuple[str, Optional[str]]]:
        """
        Check one value.
        Returns None if valid, else (message, error_tag).
        """
        # bool is an int subclass; never let True pass as a number
        if isinstance(value, bool) and self.type != ParameterType.BOOLEAN:
            return f"Invalid type for {self.name}: expected {self.type.value}", None
        if not isinstance(value, _PYTHON_TYPES[self.type]):
            return f"Invalid type for {self.name}: expected {self.type.value}", None

        if self.enum and value not in self.enum:
            allowed = ", ".join(str(v) for v in self.enum)
            return f"Invalid value for {self.name}: must be one of {allowed}", None

        if self.type in (ParameterType.INTEGER, ParameterType.NUMBER):
            too_low = self.min_value is not None and value < self.min_value
            too_high = self.max_value is not None and value > self.max_value
            if too_low or too_high:
                return self._range_message(), self.range_error

        return None

    def _range_message(self) -> str:
        label = self.name[0].upper() + self.name[1:]
        if self.min_value is not None and self.max_value is not None:
            return f"{label} must be between {self.min_value:g} and {self.max_value:g}"
        if self.min_value is not None:
            return f"{label} must be >= {self.min_value:g}"
        return f"{label} must be <= {self.max_value:g}"


@dataclass(frozen=True)
class ToolSchema:
    """JSON Schema for tool parameters."""
    parameters: Tuple[ToolParameter, ...] = ()

    @property
    def required(self) -> List[str]:
        return [p.name for p in self.parameters if p.required]

    def get(self, name: str) -> Optional[ToolParameter]:
        for param in self.parameters:
            if param.name == name:
                return param
        return None

    def to_json_schema(self) -> Dict:
        """Convert to full JSON Schema."""
        return {
            "type": "object",
            "properties": {p.name: p.to_json_schema() for p in self.parameters},
            "required": self.required,
            "additionalProperties": False
        }


@dataclass(frozen=True)
class ToolDescriptor:
    """
    Tool definition as seen by the calling agent.

    Each tool defines:
    - Unique name and one-line description
    - Parameter schema
    - Category, used for grouping in listings
    """
    name: str
    description: str
    schema: ToolSchema = field(default_factory=ToolSchema)
    category: str = "general"

    def to_dict(self) -> Dict[str, Any]:
        """Discovery format: {name, description, inputSchema}."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.schema.to_json_schema(),
        }

    def validate_args(self, args: Dict[str, Any]) -> Optional[ToolError]:
        """
        Validate arguments against schema.
        Returns None if valid, else the validation error.
        """
        if not isinstance(args, dict):
            return create_validation_error("Arguments must be an object", self.name)

        for param_name in self.schema.required:
            if args.get(param_name) is None:
                return create_validation_error(
                    f"Missing required parameter: {param_name}", self.name
                )

        known_params = {p.name for p in self.schema.parameters}
        for arg_name in args:
            if arg_name not in known_params:
                return create_validation_error(f"Unknown parameter: {arg_name}", self.name)

        for param in self.schema.parameters:
            value = args.get(param.name)
            if value is None:
                continue

            problem = param.check(value)
            if problem is not None:
                message, tag = problem
                return create_validation_error(message, self.name, tag=tag)

        return None

    def __repr__(self) -> str:
        return f"ToolDescriptor(name={self.name}, category={self.category})"


class ToolRegistry:
    """
    Immutable collection of tool descriptors.

    Built once from the full descriptor list and handed to the Dispatcher;
    there is no register/unregister after construction.
    """

    def __init__(self, descriptors: Iterable[ToolDescriptor]):
        self._logger = logging.getLogger("music_mcp.tools.registry")
        tools: Dict[str, ToolDescriptor] = {}

        for descriptor in descriptors:
            if descriptor.name in tools:
                raise ValueError(f"Duplicate tool name: {descriptor.name}")
            tools[descriptor.name] = descriptor

        self._tools = tools
        self._logger.debug(f"Registry built with {len(tools)} tools: {', '.join(tools)}")

    def get(self, name: str) -> Optional[ToolDescriptor]:
        """Get a tool by name."""
        return self._tools.get(name)

    def names(self) -> List[str]:
        return list(self._tools)

    def list_tools(self) -> List[ToolDescriptor]:
        """List all registered tools, in registration order."""
        return list(self._tools.values())

    def list_by_category(self, category: str) -> List[ToolDescriptor]:
        return [t for t in self._tools.values() if t.category == category]

    def descriptors(self) -> List[Dict[str, Any]]:
        """All tools in discovery format."""
        return [tool.to_dict() for tool in self._tools.values()]

    def validate_tool_call(self, tool_name: str, args: Dict[str, Any]) -> Optional[ToolError]:
        """
        Validate a tool call.
        Returns None if valid, else the error to report.
        """
        tool = self.get(tool_name)

        if tool is None:
            return create_unknown_tool_error(tool_name)

        return tool.validate_args(args)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __iter__(self):
        return iter(self._tools.values())

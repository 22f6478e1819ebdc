"""
Tool Registry Tests
-------------------
Tests for tool descriptors and schema validation.

Tests cover:
- Discovery format
- Required fields, enums, ranges, types, unknown parameters
- Range error tags for volume and rating
- Immutability and the queue toggle
"""

import sys
from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from core.errors import ErrorCategory, INVALID_RATING_RANGE, INVALID_VOLUME_RANGE, UNKNOWN_TOOL
from infra.config import MusicConfig
from tools.definitions import build_registry
from tools.registry import ParameterType, ToolDescriptor, ToolParameter, ToolRegistry, ToolSchema


@pytest.fixture
def registry():
    return build_registry(MusicConfig())


class TestDiscovery:
    """Tests for the exported tool list."""

    def test_all_tools_registered(self, registry):
        """Every tool is listed, in a stable order."""
        assert registry.names() == [
            "info",
            "execute_music_command",
            "get_music_info",
            "search_music",
            "manage_playlist",
            "queue_music",
        ]

    def test_descriptor_shape(self, registry):
        """Descriptors are {name, description, inputSchema}."""
        for descriptor in registry.descriptors():
            assert set(descriptor) == {"name", "description", "inputSchema"}
            assert descriptor["description"]
            schema = descriptor["inputSchema"]
            assert schema["type"] == "object"
            assert schema["additionalProperties"] is False

    def test_volume_schema(self, registry):
        """Numeric bounds are exported."""
        schema = registry.get("execute_music_command").schema.to_json_schema()

        assert schema["required"] == ["command"]
        assert schema["properties"]["volume"]["minimum"] == 0
        assert schema["properties"]["volume"]["maximum"] == 100
        assert schema["properties"]["command"]["enum"] == [
            "play", "pause", "next", "previous", "toggle_playback"
        ]

    def test_queue_tool_can_be_disabled(self):
        """The queue toggle removes queue_music."""
        registry = build_registry(MusicConfig(enable_queue_tools=False))

        assert "queue_music" not in registry
        assert len(registry) == 5


class TestValidation:
    """Tests for argument validation."""

    def test_valid_call(self, registry):
        """A well-formed call passes."""
        assert registry.validate_tool_call("search_music", {"query": "Beatles", "limit": 5}) is None

    def test_missing_required(self, registry):
        """A missing required field is rejected."""
        error = registry.validate_tool_call("search_music", {})

        assert error.category == ErrorCategory.VALIDATION_ERROR
        assert "query" in error.message

    def test_explicit_null_counts_as_missing(self, registry):
        """None for a required field is rejected."""
        error = registry.validate_tool_call("manage_playlist", {"action": None})

        assert error is not None

    def test_enum_violation(self, registry):
        """A value outside the enum is rejected."""
        error = registry.validate_tool_call("execute_music_command", {"command": "stop"})

        assert "must be one of" in error.message

    def test_unknown_parameter(self, registry):
        """Unexpected argument names are rejected."""
        error = registry.validate_tool_call("search_music", {"query": "x", "genre": "rock"})

        assert error.message == "Unknown parameter: genre"

    def test_wrong_type(self, registry):
        """A string for a number is rejected."""
        error = registry.validate_tool_call("execute_music_command", {"command": "play", "volume": "loud"})

        assert "Invalid type for volume" in error.message

    def test_bool_is_not_a_number(self, registry):
        """True is not accepted as an integer."""
        error = registry.validate_tool_call("search_music", {"query": "x", "limit": True})

        assert error is not None

    def test_limit_out_of_range(self, registry):
        """limit above 100 is rejected."""
        error = registry.validate_tool_call("search_music", {"query": "x", "limit": 500})

        assert error is not None
        assert error.category == ErrorCategory.VALIDATION_ERROR

    def test_unknown_tool(self, registry):
        """An unregistered name is an unknown-tool error."""
        error = registry.validate_tool_call("shutdown_computer", {})

        assert error.category == ErrorCategory.UNKNOWN_TOOL
        assert error.tag == UNKNOWN_TOOL


class TestRangeTags:
    """Out-of-range volume and rating keep their own tags."""

    @pytest.mark.parametrize("volume", [-1, 101, 150])
    def test_volume_tag(self, registry, volume):
        """Bad volume carries the volume tag."""
        error = registry.validate_tool_call("execute_music_command", {"command": "play", "volume": volume})

        assert error.tag == INVALID_VOLUME_RANGE
        assert error.message == "Volume must be between 0 and 100"

    def test_rating_tag(self, registry):
        """Bad rating carries the rating tag."""
        error = registry.validate_tool_call("execute_music_command", {"command": "play", "rating": 10})

        assert error.tag == INVALID_RATING_RANGE
        assert error.message == "Rating must be between 0 and 5"

    @pytest.mark.parametrize("volume", [0, 100])
    def test_volume_bounds_inclusive(self, registry, volume):
        """Bounds are inclusive."""
        assert registry.validate_tool_call("execute_music_command", {"command": "play", "volume": volume}) is None


class TestRegistryImmutability:
    """The registry is fixed at construction."""

    def test_duplicate_names_rejected(self):
        """Two tools with one name cannot be registered."""
        tool = ToolDescriptor(name="x", description="x")

        with pytest.raises(ValueError):
            ToolRegistry([tool, tool])

    def test_descriptors_are_frozen(self, registry):
        """Descriptors cannot be changed after registration."""
        with pytest.raises(FrozenInstanceError):
            registry.get("info").description = "changed"

    def test_no_register_method(self, registry):
        """There is no way to add a tool later."""
        assert not hasattr(registry, "register")

    def test_custom_parameter_schema(self):
        """Parameters export their own JSON schema."""
        param = ToolParameter(
            name="level",
            type=ParameterType.INTEGER,
            description="Level",
            min_value=1,
            max_value=10,
        )
        schema = ToolSchema(parameters=(param,)).to_json_schema()

        assert schema["properties"]["level"] == {
            "type": "integer",
            "description": "Level",
            "minimum": 1,
            "maximum": 10,
        }
        assert schema["required"] == []

"""
Contract Tests
--------------
Tests for the envelope codec, error taxonomy and request state machine.

Tests cover:
- Envelope JSON shape and MCP content encoding
- ToolError conversion and ErrorHandler bookkeeping
- Valid and invalid request state transitions
"""

import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from core.envelope import ResponseEnvelope, encode, to_content
from core.errors import (
    ErrorCategory, ErrorHandler, MissingParameterError, ToolError, ValidationError,
    create_validation_error,
)
from core.state_machine import RequestState, RequestStateMachine, TERMINAL_STATES
from infra.config import MusicConfig
from tools.base import ERROR_MARKER, ToolHandler, is_error_output, parse_output


class TestEnvelope:
    """Tests for ResponseEnvelope and its encoding."""

    def test_ok_shape(self):
        """Success envelopes omit error."""
        env = ResponseEnvelope.ok("Found 1 result(s)", [{"album": "Abbey Road"}])

        assert env.to_dict() == {
            "success": True,
            "data": [{"album": "Abbey Road"}],
            "message": "Found 1 result(s)",
        }

    def test_fail_defaults_error_to_message(self):
        """Without a tag the message doubles as error."""
        env = ResponseEnvelope.fail("Error: Music is not running")

        assert env.error == "Error: Music is not running"
        assert "data" not in env.to_dict()

    def test_encode_indented_json(self):
        """Encoding is two-space indented JSON."""
        text = encode(ResponseEnvelope.fail("Volume must be between 0 and 100", "Invalid volume range"))

        assert text.startswith("{\n  ")
        assert json.loads(text)["error"] == "Invalid volume range"

    def test_encode_keeps_unicode(self):
        """Non-ASCII titles are not escaped."""
        text = encode(ResponseEnvelope.ok("ok", {"name": "Björk"}))

        assert "Björk" in text

    def test_to_content_single_text_block(self):
        """Protocol content is exactly one text block."""
        content = to_content(ResponseEnvelope.ok("Playing"))

        assert len(content) == 1
        assert content[0].type == "text"
        assert json.loads(content[0].text) == {"success": True, "message": "Playing"}


class TestErrors:
    """Tests for error conversion."""

    def test_from_domain_exception(self):
        """Domain exceptions keep their category and tag."""
        error = ToolError.from_exception(
            MissingParameterError("Playlist name is required", tag="Missing playlist name"),
            tool_name="manage_playlist",
        )

        assert error.category == ErrorCategory.MISSING_PARAMETER
        assert error.to_envelope() == ResponseEnvelope.fail("Playlist name is required", "Missing playlist name")

    def test_from_unexpected_exception(self):
        """Anything else is an internal error with a stack trace."""
        try:
            raise KeyError("volume")
        except KeyError as e:
            error = ToolError.from_exception(e, tool_name="execute_music_command")

        assert error.category == ErrorCategory.INTERNAL_ERROR
        assert error.message.startswith("Tool execution failed: ")
        assert error.stack_trace

    def test_validation_error_tag_defaults_to_message(self):
        """A domain exception without a tag uses its message."""
        exc = ValidationError("Search query cannot be empty")

        assert exc.tag == "Search query cannot be empty"

    def test_handler_history_bounded(self):
        """The error history never grows past its limit."""
        handler = ErrorHandler(max_history=3)

        for _ in range(5):
            handler.handle(create_validation_error("bad", "search_music"))

        assert handler.get_error_stats() == {"VALIDATION_ERROR": 3}

        handler.clear_history()
        assert handler.get_error_stats() == {}


class TestOutputRules:
    """Tests for the shared output rules."""

    def test_marker_detection(self):
        """Output starting with the marker is an error."""
        assert ERROR_MARKER == "Error"
        assert is_error_output("Error: Can't get playlist")
        assert is_error_output("  Error: padded")
        assert not is_error_output("Playing")

    def test_marker_is_a_plain_prefix(self):
        """Any payload starting with the literal is read as an error."""
        assert is_error_output("Errorless Love")

    def test_parse_json(self):
        """JSON text is parsed."""
        assert parse_output('{"state": "playing"}') == {"state": "playing"}

    def test_parse_fallback(self):
        """Non-JSON text is returned unchanged."""
        assert parse_output("Playing") == "Playing"
        assert parse_output("") == ""


class TestRequestStateMachine:
    """Tests for per-request state transitions."""

    def test_happy_path(self):
        """RECEIVED -> VALIDATING -> EXECUTING -> COMPLETED."""
        machine = RequestStateMachine("search_music")

        machine.transition(RequestState.VALIDATING, "received")
        machine.transition(RequestState.EXECUTING, "valid")
        machine.transition(RequestState.COMPLETED, "done")

        assert machine.is_terminal
        assert len(machine.history) == 3

    def test_rejected_is_terminal(self):
        """Nothing follows REJECTED."""
        machine = RequestStateMachine("search_music")
        machine.transition(RequestState.VALIDATING, "received")
        machine.transition(RequestState.REJECTED, "missing query")

        assert RequestState.REJECTED in TERMINAL_STATES
        with pytest.raises(ValueError):
            machine.transition(RequestState.EXECUTING, "retry")

    def test_cannot_skip_validation(self):
        """Execution requires validation first."""
        machine = RequestStateMachine("search_music")

        assert not machine.can_transition(RequestState.EXECUTING)
        with pytest.raises(ValueError):
            machine.transition(RequestState.EXECUTING, "skip")


class TestToolHandlerBase:
    """Tests for the handler base class."""

    def test_execute_must_be_overridden(self, runner):
        """A handler without execute() cannot be constructed."""
        class Incomplete(ToolHandler):
            tool_name = "search_music"

        with pytest.raises(TypeError):
            Incomplete(runner, MusicConfig())

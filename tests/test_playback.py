"""
Playback Handler Tests
----------------------
Tests for execute_music_command.

Tests cover:
- One script per transport command
- Range checks before any script runs
- Follow-up settings order and short-circuit on failure
- Failure messages and per-call timeout
"""

import sys
import time
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from bridge.runner import ExitKind
from tools.inputs import PlaybackCommandInput
from tools.playback import PlaybackHandler


@pytest.fixture
def handler(runner, config):
    return PlaybackHandler(runner, config)


class TestTransportCommands:
    """Each command has its own script."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("command,script", [
        ("play", "play"),
        ("pause", "pause"),
        ("toggle_playback", "toggle_playback"),
        ("next", "next"),
        ("previous", "previous"),
    ])
    async def test_command_script(self, dispatcher, runner, command, script):
        """The command selects its own script."""
        runner.respond(script, f"{command} ok")

        envelope = await dispatcher.dispatch("execute_music_command", {"command": command})

        assert envelope.success is True
        assert envelope.message == f"{command} ok"
        assert runner.script_names == [script]

    @pytest.mark.asyncio
    async def test_default_timeout_from_config(self, dispatcher, runner):
        """Without timeoutSeconds the configured timeout applies."""
        await dispatcher.dispatch("execute_music_command", {"command": "play"})

        assert runner.calls[0][2] == 30_000

    @pytest.mark.asyncio
    async def test_timeout_override(self, dispatcher, runner):
        """timeoutSeconds applies to every call of the request."""
        await dispatcher.dispatch(
            "execute_music_command", {"command": "play", "volume": 20, "timeoutSeconds": 5}
        )

        assert [call[2] for call in runner.calls] == [5000, 5000]


class TestRangeChecks:
    """Handler-level range checks run before any script."""

    @pytest.mark.asyncio
    async def test_volume_scenario(self, dispatcher, runner):
        """{command: play, volume: 150} fails with the volume tag."""
        envelope = await dispatcher.dispatch("execute_music_command", {"command": "play", "volume": 150})

        assert envelope.success is False
        assert envelope.error == "Invalid volume range"
        assert runner.call_count == 0

    @pytest.mark.asyncio
    async def test_handler_rejects_volume(self, handler, runner):
        """The handler rejects a volume that bypassed the schema."""
        envelope = await handler.handle(PlaybackCommandInput(command="play", volume=150))

        assert envelope.error == "Invalid volume range"
        assert envelope.message == "Volume must be between 0 and 100"
        assert runner.call_count == 0

    @pytest.mark.asyncio
    async def test_handler_rejects_rating(self, handler, runner):
        """The handler rejects a rating that bypassed the schema."""
        envelope = await handler.handle(PlaybackCommandInput(command="play", rating=10))

        assert envelope.error == "Invalid rating range"
        assert envelope.message == "Rating must be between 0 and 5"
        assert runner.call_count == 0

    @pytest.mark.asyncio
    async def test_negative_volume(self, handler, runner):
        """Negative volume is out of range too."""
        envelope = await handler.handle(PlaybackCommandInput(command="next", volume=-5))

        assert envelope.error == "Invalid volume range"
        assert runner.call_count == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("arguments,tag", [
        ({"volume": 150.5}, "Invalid volume range"),
        ({"volume": -0.5}, "Invalid volume range"),
        ({"rating": 5.5}, "Invalid rating range"),
    ])
    async def test_fractional_out_of_range(self, dispatcher, runner, arguments, tag):
        """Fractional values outside the bounds keep the range tag."""
        envelope = await dispatcher.dispatch("execute_music_command", {"command": "play", **arguments})

        assert envelope.success is False
        assert envelope.error == tag
        assert runner.call_count == 0

    @pytest.mark.asyncio
    async def test_fractional_volume_in_range(self, dispatcher, runner):
        """A fractional volume inside the bounds is passed through."""
        envelope = await dispatcher.dispatch("execute_music_command", {"command": "play", "volume": 42.5})

        assert envelope.success is True
        assert runner.calls[1][:2] == ("set_volume", ["42.5"])


class TestFollowUps:
    """Settings applied after the transport command."""

    @pytest.mark.asyncio
    async def test_volume_after_primary(self, dispatcher, runner):
        """Volume is a second, separate call."""
        runner.respond("play", "Playing")

        envelope = await dispatcher.dispatch("execute_music_command", {"command": "play", "volume": 40})

        assert envelope.success is True
        assert envelope.message == "Playing"
        assert runner.calls[1][:2] == ("set_volume", ["40"])

    @pytest.mark.asyncio
    async def test_follow_up_order(self, dispatcher, runner):
        """Volume, shuffle, repeat, position, rating, in that order."""
        await dispatcher.dispatch("execute_music_command", {
            "command": "play",
            "rating": 4,
            "position": 30.5,
            "repeatMode": "all",
            "shuffleMode": False,
            "volume": 70,
        })

        assert runner.calls == [
            ("play", [], 30_000),
            ("set_volume", ["70"], 30_000),
            ("set_shuffle", ["false"], 30_000),
            ("set_repeat", ["all"], 30_000),
            ("set_position", ["30.5"], 30_000),
            ("set_rating", ["4"], 30_000),
        ]

    @pytest.mark.asyncio
    async def test_primary_failure_skips_volume(self, dispatcher, runner):
        """A failed transport command short-circuits follow-ups."""
        runner.fail("play", ExitKind.NON_ZERO_EXIT, stderr="Music got an error")

        envelope = await dispatcher.dispatch("execute_music_command", {"command": "play", "volume": 40})

        assert envelope.success is False
        assert runner.script_names == ["play"]
        assert envelope.message.startswith("Failed to execute command: ")
        assert envelope.message.endswith(
            "Ensure Music app is running and you have granted automation permissions."
        )
        assert "Music got an error" in envelope.error

    @pytest.mark.asyncio
    async def test_marker_failure_skips_volume(self, dispatcher, runner):
        """Error-marker output counts as failure despite exit 0."""
        runner.respond("play", "Error: Can't get current track")

        envelope = await dispatcher.dispatch("execute_music_command", {"command": "play", "volume": 40})

        assert envelope.success is False
        assert envelope.message == "Error: Can't get current track"
        assert envelope.error == "Error: Can't get current track"
        assert runner.script_names == ["play"]

    @pytest.mark.asyncio
    async def test_follow_up_failure_fails_call(self, dispatcher, runner):
        """A failed follow-up fails the whole call and stops later ones."""
        runner.respond("play", "Playing")
        runner.respond("set_volume", "Error: volume locked")

        envelope = await dispatcher.dispatch(
            "execute_music_command", {"command": "play", "volume": 40, "rating": 3}
        )

        assert envelope.success is False
        assert envelope.error == "Error: volume locked"
        assert runner.script_names == ["play", "set_volume"]


class TestTimeouts:
    """Timeouts reach the caller promptly."""

    @pytest.mark.asyncio
    async def test_timeout_reported(self, dispatcher, runner):
        """A timed-out script yields a timeout error within a bounded margin."""
        runner.fail("play", ExitKind.TIMEOUT, delay=1.0)

        start = time.monotonic()
        envelope = await dispatcher.dispatch("execute_music_command", {"command": "play", "timeoutSeconds": 1})
        elapsed = time.monotonic() - start

        assert envelope.success is False
        assert "timed out after 1000ms" in envelope.error
        assert elapsed < 2.0

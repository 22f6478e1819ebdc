"""
Playback Control
----------------
Handler for execute_music_command: one transport command, then any
requested follow-up settings, each as its own script call.
"""

from typing import List, Tuple

from bridge import scripts
from bridge.scripts import ScriptRef
from core.envelope import ResponseEnvelope
from core.errors import INVALID_RATING_RANGE, INVALID_VOLUME_RANGE, ValidationError
from .base import ToolHandler
from .definitions import EXECUTE_MUSIC_COMMAND
from .inputs import PlaybackCommandInput

TRANSPORT_SCRIPTS = {
    "play": scripts.PLAY,
    "pause": scripts.PAUSE,
    "toggle_playback": scripts.TOGGLE_PLAYBACK,
    "next": scripts.NEXT_TRACK,
    "previous": scripts.PREVIOUS_TRACK,
}


def _number_arg(value) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


class PlaybackHandler(ToolHandler):
    """Transport commands plus volume, shuffle, repeat, position and rating."""

    tool_name = EXECUTE_MUSIC_COMMAND

    async def execute(self, params: PlaybackCommandInput) -> ResponseEnvelope:
        # Re-checked here so no script runs for an out-of-range value
        if params.volume is not None and not 0 <= params.volume <= 100:
            raise ValidationError("Volume must be between 0 and 100", tag=INVALID_VOLUME_RANGE)
        if params.rating is not None and not 0 <= params.rating <= 5:
            raise ValidationError("Rating must be between 0 and 5", tag=INVALID_RATING_RANGE)

        timeout_ms = None
        if params.timeout_seconds:
            timeout_ms = int(params.timeout_seconds * 1000)

        self._logger.info(f"Executing music command: {params.command}")
        primary = await self.run_script(TRANSPORT_SCRIPTS[params.command], timeout_ms=timeout_ms)
        if primary.failed:
            return self.fail(primary, params)

        for script, args in self.follow_ups(params):
            output = await self.run_script(script, args, timeout_ms=timeout_ms)
            if output.failed:
                return self.fail(output, params)

        return ResponseEnvelope.ok(primary.text)

    def follow_ups(self, params: PlaybackCommandInput) -> List[Tuple[ScriptRef, List[str]]]:
        """Settings to apply after the transport command, in order."""
        steps = []
        if params.volume is not None:
            steps.append((scripts.SET_VOLUME, [_number_arg(params.volume)]))
        if params.shuffle_mode is not None:
            steps.append((scripts.SET_SHUFFLE, ["true" if params.shuffle_mode else "false"]))
        if params.repeat_mode is not None:
            steps.append((scripts.SET_REPEAT, [params.repeat_mode]))
        if params.position is not None:
            steps.append((scripts.SET_POSITION, [_number_arg(params.position)]))
        if params.rating is not None:
            steps.append((scripts.SET_RATING, [_number_arg(params.rating)]))
        return steps

    def failure_message(self, reason: str, params) -> str:
        return (
            f"Failed to execute command: {reason}. "
            "Ensure Music app is running and you have granted automation permissions."
        )

"""
Queue Management
----------------
Handler for queue_music. The queue is a user playlist maintained by the
queue scripts.
"""

from typing import List

from bridge import scripts
from core.envelope import ResponseEnvelope
from core.errors import MISSING_PLAYLIST_NAME, MISSING_TRACK_SEARCH_TERM, MissingParameterError
from .base import ToolHandler
from .definitions import QUEUE_MUSIC
from .inputs import QueueMusicInput

ACTION_SCRIPTS = {
    "view_queue": scripts.QUEUE_INFO,
    "add_to_queue": scripts.ADD_TO_QUEUE,
    "play_queue": scripts.PLAY_QUEUE,
    "clear_queue": scripts.CLEAR_QUEUE,
    "play_playlist": scripts.PLAY_PLAYLIST,
}


class QueueHandler(ToolHandler):
    """View, fill, play and clear the queue; play a playlist."""

    tool_name = QUEUE_MUSIC

    async def execute(self, params: QueueMusicInput) -> ResponseEnvelope:
        args = self.script_args(params)
        self._logger.info(f"Managing queue: {params.action}")

        output = await self.run_script(ACTION_SCRIPTS[params.action], args)
        if output.failed:
            return self.fail(output, params)

        return ResponseEnvelope.ok(output.text, output.data)

    def script_args(self, params: QueueMusicInput) -> List[str]:
        if params.action == "add_to_queue":
            if not params.track_search_term:
                raise MissingParameterError(
                    "Track search term is required for add_to_queue action",
                    tag=MISSING_TRACK_SEARCH_TERM,
                )
            return [params.track_search_term]

        if params.action == "play_playlist":
            if not params.playlist_name:
                raise MissingParameterError(
                    "Playlist name is required for play_playlist action", tag=MISSING_PLAYLIST_NAME
                )
            return [params.playlist_name, "true" if params.shuffle else "false"]

        return []

    def failure_message(self, reason: str, params) -> str:
        return f"Queue {params.action} failed: {reason}"

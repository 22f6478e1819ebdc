"""
Playlist Management
-------------------
Handler for manage_playlist. Every action checks its own required
fields before any script runs.
"""

from typing import List

from bridge import scripts
from core.envelope import ResponseEnvelope
from core.errors import MISSING_PLAYLIST_NAME, MISSING_REQUIRED_PARAMETERS, MissingParameterError
from .base import ToolHandler
from .definitions import MANAGE_PLAYLIST
from .inputs import ManagePlaylistInput

ACTION_SCRIPTS = {
    "list": scripts.GET_PLAYLISTS,
    "create": scripts.CREATE_PLAYLIST,
    "add_track": scripts.ADD_TO_PLAYLIST,
    "remove_track": scripts.REMOVE_FROM_PLAYLIST,
    "rename": scripts.RENAME_PLAYLIST,
    "delete": scripts.DELETE_PLAYLIST,
    "get_tracks": scripts.GET_PLAYLIST_TRACKS,
}


class PlaylistHandler(ToolHandler):
    """List, create, rename and delete playlists; add and remove tracks."""

    tool_name = MANAGE_PLAYLIST

    async def execute(self, params: ManagePlaylistInput) -> ResponseEnvelope:
        args = self.script_args(params)
        self._logger.info(f"Managing playlist: {params.action}")

        output = await self.run_script(ACTION_SCRIPTS[params.action], args)
        if output.failed:
            return self.fail(output, params)

        return ResponseEnvelope.ok(output.text, output.data)

    def script_args(self, params: ManagePlaylistInput) -> List[str]:
        """Arguments for the action's script; raises if a field is missing."""
        action = params.action

        if action == "list":
            return []

        if action in ("create", "delete", "get_tracks"):
            if not params.playlist_name:
                raise MissingParameterError(
                    f"Playlist name is required for {action} action", tag=MISSING_PLAYLIST_NAME
                )
            return [params.playlist_name]

        if action in ("add_track", "remove_track"):
            if not params.playlist_name or not params.track_id:
                raise MissingParameterError(
                    f"Playlist name and track ID/search term are required for {action} action",
                    tag=MISSING_REQUIRED_PARAMETERS,
                )
            return [params.playlist_name, params.track_id]

        # rename
        if not params.playlist_name or not params.new_name:
            raise MissingParameterError(
                "Current playlist name and new name are required for rename action",
                tag=MISSING_REQUIRED_PARAMETERS,
            )
        return [params.playlist_name, params.new_name]

    def failure_message(self, reason: str, params) -> str:
        return f"Playlist {params.action} failed: {reason}"

"""
Script Table
------------
Static mapping from tool action to automation script.

One reference per distinct action. Actions with different side effects
never share a script.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict

BUNDLED_SCRIPTS_DIR = Path(__file__).parent / "scripts"


@dataclass(frozen=True)
class ScriptRef:
    """An automation script, relative to the scripts directory."""
    name: str
    relative_path: str

    def resolve(self, scripts_dir: Path) -> Path:
        return Path(scripts_dir) / self.relative_path


# Playback
PLAY = ScriptRef("play", "playback/play.applescript")
PAUSE = ScriptRef("pause", "playback/pause.applescript")
TOGGLE_PLAYBACK = ScriptRef("toggle_playback", "playback/play-pause.applescript")
NEXT_TRACK = ScriptRef("next", "playback/next-track.applescript")
PREVIOUS_TRACK = ScriptRef("previous", "playback/previous-track.applescript")
SET_VOLUME = ScriptRef("set_volume", "playback/set-volume.applescript")
SET_SHUFFLE = ScriptRef("set_shuffle", "playback/set-shuffle.applescript")
SET_REPEAT = ScriptRef("set_repeat", "playback/set-repeat.applescript")
SET_POSITION = ScriptRef("set_position", "playback/set-position.applescript")
SET_RATING = ScriptRef("set_rating", "playback/set-rating.applescript")

# Library
CURRENT_TRACK = ScriptRef("current_track", "library/get-current-track.applescript")
PLAYBACK_STATUS = ScriptRef("playback_status", "library/get-playback-status.applescript")
GET_PLAYLISTS = ScriptRef("get_playlists", "library/get-playlists.applescript")
GET_ALBUMS = ScriptRef("get_albums", "library/get-albums.applescript")
SEARCH_TRACKS = ScriptRef("search_tracks", "library/search-tracks.applescript")

# Playlists
CREATE_PLAYLIST = ScriptRef("create_playlist", "playlist/create-playlist.applescript")
ADD_TO_PLAYLIST = ScriptRef("add_to_playlist", "playlist/add-to-playlist.applescript")
REMOVE_FROM_PLAYLIST = ScriptRef("remove_from_playlist", "playlist/remove-from-playlist.applescript")
RENAME_PLAYLIST = ScriptRef("rename_playlist", "playlist/rename-playlist.applescript")
DELETE_PLAYLIST = ScriptRef("delete_playlist", "playlist/delete-playlist.applescript")
GET_PLAYLIST_TRACKS = ScriptRef("get_playlist_tracks", "playlist/get-playlist-tracks.applescript")
PLAY_PLAYLIST = ScriptRef("play_playlist", "playlist/play-playlist.applescript")

# Queue
QUEUE_INFO = ScriptRef("queue_info", "queue/get-queue-info.applescript")
ADD_TO_QUEUE = ScriptRef("add_to_queue", "queue/add-to-queue.applescript")
PLAY_QUEUE = ScriptRef("play_queue", "queue/play-queue.applescript")
CLEAR_QUEUE = ScriptRef("clear_queue", "queue/clear-queue.applescript")

# Diagnostics
MUSIC_VERSION = ScriptRef("music_version", "diagnostics/music-version.applescript")


ALL_SCRIPTS: Dict[str, ScriptRef] = {
    ref.name: ref
    for ref in (
        PLAY, PAUSE, TOGGLE_PLAYBACK, NEXT_TRACK, PREVIOUS_TRACK,
        SET_VOLUME, SET_SHUFFLE, SET_REPEAT, SET_POSITION, SET_RATING,
        CURRENT_TRACK, PLAYBACK_STATUS, GET_PLAYLISTS, GET_ALBUMS, SEARCH_TRACKS,
        CREATE_PLAYLIST, ADD_TO_PLAYLIST, REMOVE_FROM_PLAYLIST, RENAME_PLAYLIST,
        DELETE_PLAYLIST, GET_PLAYLIST_TRACKS, PLAY_PLAYLIST,
        QUEUE_INFO, ADD_TO_QUEUE, PLAY_QUEUE, CLEAR_QUEUE,
        MUSIC_VERSION,
    )
}

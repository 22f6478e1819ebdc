"""
Tool Definitions
----------------
The closed set of tools this server exposes, as registry descriptors.
"""

from typing import List

from core.errors import INVALID_RATING_RANGE, INVALID_VOLUME_RANGE
from infra.config import MusicConfig
from .registry import ParameterType, ToolDescriptor, ToolParameter, ToolRegistry, ToolSchema

INFO = "info"
EXECUTE_MUSIC_COMMAND = "execute_music_command"
GET_MUSIC_INFO = "get_music_info"
SEARCH_MUSIC = "search_music"
MANAGE_PLAYLIST = "manage_playlist"
QUEUE_MUSIC = "queue_music"

PLAYBACK_COMMANDS = ("play", "pause", "next", "previous", "toggle_playback")
REPEAT_MODES = ("off", "one", "all")
INFO_TYPES = ("current_track", "playback_status", "queue", "library_stats")
INFO_FORMATS = ("simple", "detailed")
SEARCH_TYPES = ("all", "track", "album", "artist", "playlist")
PLAYLIST_ACTIONS = ("create", "add_track", "remove_track", "rename", "delete", "list", "get_tracks")
QUEUE_ACTIONS = ("view_queue", "add_to_queue", "play_queue", "clear_queue", "play_playlist")


INFO_TOOL = ToolDescriptor(
    name=INFO,
    description="Get diagnostic information about the Music MCP server status",
    schema=ToolSchema(parameters=(
        ToolParameter(
            name="command",
            type=ParameterType.STRING,
            description="Command to execute",
            enum=("info",),
        ),
    )),
    category="diagnostics",
)

EXECUTE_MUSIC_COMMAND_TOOL = ToolDescriptor(
    name=EXECUTE_MUSIC_COMMAND,
    description="Control Apple Music playback (play, pause, skip, volume, shuffle, repeat, rating)",
    schema=ToolSchema(parameters=(
        ToolParameter(
            name="command",
            type=ParameterType.STRING,
            description="Playback command to execute",
            required=True,
            enum=PLAYBACK_COMMANDS,
        ),
        ToolParameter(
            name="volume",
            type=ParameterType.NUMBER,
            description="Volume level (0-100)",
            min_value=0,
            max_value=100,
            range_error=INVALID_VOLUME_RANGE,
        ),
        ToolParameter(
            name="position",
            type=ParameterType.NUMBER,
            description="Position in track (seconds)",
            min_value=0,
        ),
        ToolParameter(
            name="shuffleMode",
            type=ParameterType.BOOLEAN,
            description="Enable or disable shuffle",
        ),
        ToolParameter(
            name="repeatMode",
            type=ParameterType.STRING,
            description="Repeat mode",
            enum=REPEAT_MODES,
        ),
        ToolParameter(
            name="rating",
            type=ParameterType.NUMBER,
            description="Track rating (0-5 stars)",
            min_value=0,
            max_value=5,
            range_error=INVALID_RATING_RANGE,
        ),
        ToolParameter(
            name="timeoutSeconds",
            type=ParameterType.NUMBER,
            description="Timeout for the operation in seconds",
            min_value=1,
        ),
    )),
    category="playback",
)

GET_MUSIC_INFO_TOOL = ToolDescriptor(
    name=GET_MUSIC_INFO,
    description="Retrieve information about current playback or library",
    schema=ToolSchema(parameters=(
        ToolParameter(
            name="infoType",
            type=ParameterType.STRING,
            description="Type of information to retrieve",
            required=True,
            enum=INFO_TYPES,
        ),
        ToolParameter(
            name="format",
            type=ParameterType.STRING,
            description="Output format detail level",
            default="simple",
            enum=INFO_FORMATS,
        ),
    )),
    category="library",
)

SEARCH_MUSIC_TOOL = ToolDescriptor(
    name=SEARCH_MUSIC,
    description="Search the music library",
    schema=ToolSchema(parameters=(
        ToolParameter(
            name="query",
            type=ParameterType.STRING,
            description="Search query string",
            required=True,
        ),
        ToolParameter(
            name="searchType",
            type=ParameterType.STRING,
            description="Type of content to search for",
            default="all",
            enum=SEARCH_TYPES,
        ),
        ToolParameter(
            name="limit",
            type=ParameterType.INTEGER,
            description="Maximum number of results to return",
            min_value=1,
            max_value=100,
        ),
    )),
    category="library",
)

MANAGE_PLAYLIST_TOOL = ToolDescriptor(
    name=MANAGE_PLAYLIST,
    description="Create, modify, and manage playlists",
    schema=ToolSchema(parameters=(
        ToolParameter(
            name="action",
            type=ParameterType.STRING,
            description="Playlist action to perform",
            required=True,
            enum=PLAYLIST_ACTIONS,
        ),
        ToolParameter(
            name="playlistName",
            type=ParameterType.STRING,
            description="Name of the playlist",
        ),
        ToolParameter(
            name="trackId",
            type=ParameterType.STRING,
            description="Track ID or search term for add/remove operations",
        ),
        ToolParameter(
            name="newName",
            type=ParameterType.STRING,
            description="New name for rename action",
        ),
    )),
    category="playlists",
)

QUEUE_MUSIC_TOOL = ToolDescriptor(
    name=QUEUE_MUSIC,
    description="Manage the playback queue and play playlists",
    schema=ToolSchema(parameters=(
        ToolParameter(
            name="action",
            type=ParameterType.STRING,
            description="Queue action to perform",
            required=True,
            enum=QUEUE_ACTIONS,
        ),
        ToolParameter(
            name="trackSearchTerm",
            type=ParameterType.STRING,
            description="Search term for finding a track to add to the queue",
        ),
        ToolParameter(
            name="playlistName",
            type=ParameterType.STRING,
            description="Name of the playlist to play",
        ),
        ToolParameter(
            name="shuffle",
            type=ParameterType.BOOLEAN,
            description="Shuffle the playlist when playing",
            default=False,
        ),
    )),
    category="queue",
)


def build_descriptors(config: MusicConfig) -> List[ToolDescriptor]:
    """Descriptors enabled by the given configuration, in listing order."""
    descriptors = [
        INFO_TOOL,
        EXECUTE_MUSIC_COMMAND_TOOL,
        GET_MUSIC_INFO_TOOL,
        SEARCH_MUSIC_TOOL,
        MANAGE_PLAYLIST_TOOL,
    ]
    if config.enable_queue_tools:
        descriptors.append(QUEUE_MUSIC_TOOL)
    return descriptors


def build_registry(config: MusicConfig) -> ToolRegistry:
    return ToolRegistry(build_descriptors(config))

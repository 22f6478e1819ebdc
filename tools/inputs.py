"""
Typed Tool Inputs
-----------------
One pydantic model per tool, combined into a union discriminated on the
tool name. Handlers only ever see these models, never the raw argument
mapping.

Rules:
- Parsing happens after registry validation; shape problems are already
  reported by then
- Range rules live in the registry and in the handlers, not here, so a
  bad volume or rating keeps its own error tag
"""

from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .definitions import (
    EXECUTE_MUSIC_COMMAND, GET_MUSIC_INFO, INFO, MANAGE_PLAYLIST, QUEUE_MUSIC, SEARCH_MUSIC,
)


class ToolInput(BaseModel):
    """Base for all tool inputs."""
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)


class InfoInput(ToolInput):
    tool: Literal["info"] = INFO
    command: Optional[Literal["info"]] = None


class PlaybackCommandInput(ToolInput):
    tool: Literal["execute_music_command"] = EXECUTE_MUSIC_COMMAND
    command: Literal["play", "pause", "next", "previous", "toggle_playback"]
    volume: Optional[float] = None
    position: Optional[float] = None
    shuffle_mode: Optional[bool] = Field(None, alias="shuffleMode")
    repeat_mode: Optional[Literal["off", "one", "all"]] = Field(None, alias="repeatMode")
    rating: Optional[float] = None
    timeout_seconds: Optional[float] = Field(None, alias="timeoutSeconds")


class MusicInfoInput(ToolInput):
    tool: Literal["get_music_info"] = GET_MUSIC_INFO
    info_type: Literal["current_track", "playback_status", "queue", "library_stats"] = Field(
        ..., alias="infoType"
    )
    format: Literal["simple", "detailed"] = "simple"


class SearchMusicInput(ToolInput):
    tool: Literal["search_music"] = SEARCH_MUSIC
    query: str
    search_type: Literal["all", "track", "album", "artist", "playlist"] = Field(
        "all", alias="searchType"
    )
    limit: Optional[int] = None


class ManagePlaylistInput(ToolInput):
    tool: Literal["manage_playlist"] = MANAGE_PLAYLIST
    action: Literal["create", "add_track", "remove_track", "rename", "delete", "list", "get_tracks"]
    playlist_name: Optional[str] = Field(None, alias="playlistName")
    track_id: Optional[str] = Field(None, alias="trackId")
    new_name: Optional[str] = Field(None, alias="newName")


class QueueMusicInput(ToolInput):
    tool: Literal["queue_music"] = QUEUE_MUSIC
    action: Literal["view_queue", "add_to_queue", "play_queue", "clear_queue", "play_playlist"]
    track_search_term: Optional[str] = Field(None, alias="trackSearchTerm")
    playlist_name: Optional[str] = Field(None, alias="playlistName")
    shuffle: bool = False


AnyToolInput = Annotated[
    Union[
        InfoInput,
        PlaybackCommandInput,
        MusicInfoInput,
        SearchMusicInput,
        ManagePlaylistInput,
        QueueMusicInput,
    ],
    Field(discriminator="tool"),
]

_adapter: TypeAdapter = TypeAdapter(AnyToolInput)


def parse_tool_input(tool_name: str, args: Dict[str, Any]) -> ToolInput:
    """
    Build the typed input for a validated call.

    None values are dropped first so an explicit null means "not given".
    Raises pydantic.ValidationError if the arguments still do not fit.
    """
    data = {key: value for key, value in args.items() if value is not None}
    data["tool"] = tool_name
    return _adapter.validate_python(data)

"""
Library Queries
---------------
Handlers for get_music_info and search_music.

Track search is delegated to the automation layer. Playlists and albums
cannot be filtered there, so the full collection is fetched and
filtered here with a case-insensitive substring match.
"""

from typing import Any, Dict, List, Sequence
import asyncio

from bridge import scripts
from core.envelope import ResponseEnvelope
from core.errors import EMPTY_QUERY, ValidationError
from .base import ToolHandler
from .definitions import GET_MUSIC_INFO, SEARCH_MUSIC
from .inputs import MusicInfoInput, SearchMusicInput

INFO_SCRIPTS = {
    "current_track": scripts.CURRENT_TRACK,
    "playback_status": scripts.PLAYBACK_STATUS,
    "queue": scripts.QUEUE_INFO,
}

# searchType -> (collection script, fields matched against the query)
LOCAL_FILTERS = {
    "playlist": (scripts.GET_PLAYLISTS, ("name",)),
    "album": (scripts.GET_ALBUMS, ("album", "artist")),
    "artist": (scripts.GET_ALBUMS, ("artist",)),
}


def filter_items(items: List[Any], query: str, keys: Sequence[str]) -> List[Any]:
    """Keep mappings where any of keys contains query, ignoring case."""
    needle = query.strip().lower()
    matches = []
    for item in items:
        if not isinstance(item, dict):
            continue
        if any(needle in str(item.get(key) or "").lower() for key in keys):
            matches.append(item)
    return matches


class MusicInfoHandler(ToolHandler):
    """Current track, playback status, queue and library statistics."""

    tool_name = GET_MUSIC_INFO

    async def execute(self, params: MusicInfoInput) -> ResponseEnvelope:
        self._logger.info(f"Getting music info: {params.info_type}")

        if params.info_type == "library_stats":
            return await self._library_stats(params)

        args = [params.format] if params.info_type == "current_track" else []
        output = await self.run_script(INFO_SCRIPTS[params.info_type], args)
        if output.failed:
            return self.fail(output, params)

        return ResponseEnvelope.ok("Music info retrieved successfully", output.data)

    async def _library_stats(self, params: MusicInfoInput) -> ResponseEnvelope:
        playlists, albums = await asyncio.gather(
            self.run_script(scripts.GET_PLAYLISTS),
            self.run_script(scripts.GET_ALBUMS),
        )
        # No partial results: the first failure decides the envelope
        for output in (playlists, albums):
            if output.failed:
                return self.fail(output, params)

        data: Dict[str, Any] = {"playlists": playlists.data, "albums": albums.data}
        return ResponseEnvelope.ok("Music info retrieved successfully", data)

    def failure_message(self, reason: str, params) -> str:
        return f"Failed to retrieve music info: {reason}"


class SearchHandler(ToolHandler):
    """Search tracks, albums, artists and playlists."""

    tool_name = SEARCH_MUSIC

    async def execute(self, params: SearchMusicInput) -> ResponseEnvelope:
        query = params.query.strip()
        if not query:
            raise ValidationError("Search query cannot be empty", tag=EMPTY_QUERY)

        limit = self.config.effective_search_limit(params.limit)
        self._logger.info(f"Searching {params.search_type} for {query!r} (limit {limit})")

        if params.search_type in LOCAL_FILTERS:
            script, keys = LOCAL_FILTERS[params.search_type]
            output = await self.run_script(script)
            if output.failed:
                return self.fail(output, params)
            data = output.data
            if isinstance(data, list):
                data = filter_items(data, query, keys)
        else:
            output = await self.run_script(scripts.SEARCH_TRACKS, [query])
            if output.failed:
                return self.fail(output, params)
            data = output.data

        if isinstance(data, list):
            data = data[:limit]
            count = len(data)
        else:
            count = 1

        return ResponseEnvelope.ok(f"Found {count} result(s)", data)

    def failure_message(self, reason: str, params) -> str:
        return f"Search failed: {reason}"

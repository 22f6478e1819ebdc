"""
MCP Server
----------
Exposes the dispatcher over the Model Context Protocol on stdio.

stdout belongs to the protocol; all logging goes to stderr or the log
file. The SDK's own input validation is disabled so the dispatcher
alone decides what a malformed call returns.
"""

from typing import List, Optional
import logging

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from bridge.runner import ScriptRunner
from core.envelope import to_content
from infra.config import MusicConfig
from infra.health import HealthMonitor
from infra.version import get_version
from tools.dispatcher import Dispatcher, create_dispatcher

SERVER_NAME = "music-mcp"


def create_runner(config: MusicConfig, health: Optional[HealthMonitor] = None) -> ScriptRunner:
    """Script runner configured from settings."""
    return ScriptRunner(
        scripts_dir=config.scripts_dir,
        interpreter=config.interpreter,
        default_timeout_ms=config.timeout_ms,
        health=health,
    )


class MusicMCPServer:
    """
    Owns the runtime objects for one server process.

    The health monitor, runner and dispatcher are created once here and
    shared by every transport that serves this instance.
    """

    def __init__(self, config: MusicConfig, dispatcher: Optional[Dispatcher] = None):
        self.config = config
        self.health = HealthMonitor()
        self.runner = create_runner(config, self.health)
        self.dispatcher = dispatcher or create_dispatcher(config, self.runner, self.health)
        self.server = Server(SERVER_NAME, version=get_version())
        self._logger = logging.getLogger("music_mcp.infra.server")
        self._register_handlers()

    def tools(self) -> List[Tool]:
        return [Tool(**descriptor) for descriptor in self.dispatcher.list_tools()]

    def _register_handlers(self) -> None:
        """Register MCP protocol handlers."""

        @self.server.list_tools()
        async def list_tools() -> List[Tool]:
            self._logger.debug("list_tools called")
            return self.tools()

        @self.server.call_tool(validate_input=False)
        async def call_tool(name: str, arguments: dict) -> List[TextContent]:
            envelope = await self.dispatcher.dispatch(name, arguments)
            return to_content(envelope)

    async def run(self) -> None:
        """Serve on stdio until the client disconnects."""
        self._logger.info(
            f"Starting {SERVER_NAME} {get_version()} (stdio, {len(self.dispatcher.registry)} tools)"
        )
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )

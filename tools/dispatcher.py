"""
Tool Dispatcher
---------------
The single entry point for tool calls: registry lookup, schema
validation, typed input parsing, handler execution, and the final
envelope.

Exit Criterion: No tool call can take the server down.

Rules:
- Exactly one ResponseEnvelope per call, on every path
- Unknown tools and invalid arguments are rejected before any handler
  (and therefore any script) runs
- Anything a handler raises is caught here and reported as a failure
- No retries
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple
import logging
import time

from pydantic import ValidationError as PydanticValidationError

from bridge.runner import ScriptRunner
from core.envelope import ResponseEnvelope
from core.errors import ErrorHandler, ToolError, create_validation_error
from core.state_machine import RequestState, RequestStateMachine
from infra.config import MusicConfig
from infra.health import HealthMonitor
from infra.logging import CallContext, log_call_end
from .base import ToolHandler
from .definitions import (
    EXECUTE_MUSIC_COMMAND, GET_MUSIC_INFO, INFO, MANAGE_PLAYLIST, QUEUE_MUSIC, SEARCH_MUSIC,
    build_registry,
)
from .diagnostics import DiagnosticsHandler
from .inputs import parse_tool_input
from .library import MusicInfoHandler, SearchHandler
from .playback import PlaybackHandler
from .playlists import PlaylistHandler
from .queue import QueueHandler
from .registry import ToolRegistry


class Dispatcher:
    """
    Routes validated calls to handlers.

    The registry and handler map are fixed at construction; every
    registered tool must have a handler or construction fails.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        handlers: Mapping[str, ToolHandler],
        error_handler: Optional[ErrorHandler] = None,
    ):
        missing = [name for name in registry.names() if name not in handlers]
        if missing:
            raise ValueError(f"No handler for registered tools: {', '.join(missing)}")

        self.registry = registry
        self._handlers = dict(handlers)
        self.errors = error_handler or ErrorHandler()
        self._logger = logging.getLogger("music_mcp.tools.dispatcher")

    def list_tools(self) -> List[Dict[str, Any]]:
        """Discovery: every registered tool as {name, description, inputSchema}."""
        return self.registry.descriptors()

    async def dispatch(self, tool_name: str, arguments: Optional[Dict[str, Any]] = None) -> ResponseEnvelope:
        """Handle one tool call and return its envelope."""
        envelope, _ = await self.dispatch_traced(tool_name, arguments)
        return envelope

    async def dispatch_traced(
        self,
        tool_name: str,
        arguments: Optional[Dict[str, Any]] = None,
    ) -> Tuple[ResponseEnvelope, RequestStateMachine]:
        """Like dispatch(), also returning the call's state machine."""
        with CallContext() as call_id:
            start = time.monotonic()
            machine = RequestStateMachine(tool_name, call_id)
            self._logger.info(f"Tool call: {tool_name}")

            envelope = await self._run(tool_name, {} if arguments is None else arguments, machine)

            log_call_end(
                call_id,
                tool_name,
                success=envelope.success,
                duration_ms=(time.monotonic() - start) * 1000,
                error=envelope.error,
            )
        return envelope, machine

    async def _run(
        self,
        tool_name: str,
        arguments: Dict[str, Any],
        machine: RequestStateMachine,
    ) -> ResponseEnvelope:
        machine.transition(RequestState.VALIDATING, "call received")

        error = self.registry.validate_tool_call(tool_name, arguments)
        if error is None:
            try:
                params = parse_tool_input(tool_name, arguments)
            except PydanticValidationError as e:
                first = e.errors()[0]
                location = ".".join(str(part) for part in first.get("loc", ()))
                error = create_validation_error(f"Invalid value for {location}: {first['msg']}", tool_name)

        if error is not None:
            machine.transition(RequestState.REJECTED, error.message)
            return self.errors.handle(error)

        machine.transition(RequestState.EXECUTING, "arguments valid")
        try:
            envelope = await self._handlers[tool_name].handle(params)
        except Exception as e:
            machine.transition(RequestState.FAILED, f"handler raised {type(e).__name__}")
            return self.errors.handle(ToolError.from_exception(e, tool_name))

        if envelope.success:
            machine.transition(RequestState.COMPLETED, "handler succeeded")
        else:
            machine.transition(RequestState.FAILED, envelope.error or envelope.message)
        return envelope


def create_dispatcher(
    config: MusicConfig,
    runner: ScriptRunner,
    health: Optional[HealthMonitor] = None,
) -> Dispatcher:
    """Build the registry and handler set for a configuration."""
    errors = ErrorHandler()
    registry = build_registry(config)

    handlers: Dict[str, ToolHandler] = {
        INFO: DiagnosticsHandler(runner, config, errors, health=health),
        EXECUTE_MUSIC_COMMAND: PlaybackHandler(runner, config, errors),
        GET_MUSIC_INFO: MusicInfoHandler(runner, config, errors),
        SEARCH_MUSIC: SearchHandler(runner, config, errors),
        MANAGE_PLAYLIST: PlaylistHandler(runner, config, errors),
    }
    if QUEUE_MUSIC in registry:
        handlers[QUEUE_MUSIC] = QueueHandler(runner, config, errors)

    return Dispatcher(registry, handlers, errors)

"""
Tool Handler Base
-----------------
Shared policy for every handler: script invocation, error-marker
detection, JSON parsing with text fallback, and envelope assembly.

Rules:
- handle() always returns exactly one ResponseEnvelope
- Bad input is raised as ValidationError / MissingParameterError before
  any script runs, and turned into an envelope here
- Script failures are values (ScriptOutput.error), never exceptions
- A parse failure degrades to the raw text; it never fails the call
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional, Sequence
import json
import logging

from bridge.runner import ExecutionResult, ExitKind, ScriptRunner
from bridge.scripts import ScriptRef
from core.envelope import ResponseEnvelope
from core.errors import ErrorCategory, ErrorHandler, MusicMCPError, ToolError
from infra.config import MusicConfig

# Prefix the automation scripts use to report a domain failure.
# A successful payload starting with this literal is misread as a failure.
ERROR_MARKER = "Error"

_EXIT_CATEGORIES = {
    ExitKind.TIMEOUT: ErrorCategory.EXTERNAL_TIMEOUT,
    ExitKind.NON_ZERO_EXIT: ErrorCategory.EXTERNAL_NON_ZERO_EXIT,
    ExitKind.SPAWN_FAILURE: ErrorCategory.EXTERNAL_SPAWN,
}


def is_error_output(text: str) -> bool:
    """True if trimmed script output carries the error marker."""
    return text.strip().startswith(ERROR_MARKER)


def parse_output(text: str) -> Any:
    """Parse script output as JSON, falling back to the text itself."""
    try:
        return json.loads(text)
    except ValueError:
        logging.getLogger("music_mcp.tools").debug(
            f"Output is not JSON, returning as text ({len(text)} chars)"
        )
        return text


@dataclass
class ScriptOutput:
    """Outcome of one script call as seen by a handler."""
    script: str
    text: str = ""
    category: Optional[ErrorCategory] = None
    reason: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.category is not None

    @property
    def is_marker(self) -> bool:
        return self.category == ErrorCategory.SCRIPT_ERROR

    @property
    def data(self) -> Any:
        return parse_output(self.text)

    @classmethod
    def from_result(cls, result: ExecutionResult) -> "ScriptOutput":
        if not result.success:
            return cls(
                script=result.script,
                category=_EXIT_CATEGORIES[result.exit_kind],
                reason=result.error_message,
            )
        if is_error_output(result.stdout):
            return cls(
                script=result.script,
                text=result.stdout,
                category=ErrorCategory.SCRIPT_ERROR,
                reason=result.stdout,
            )
        return cls(script=result.script, text=result.stdout)


class ToolHandler(ABC):
    """
    Base class for one logical tool.

    Subclasses implement execute(); callers only use handle().
    """

    tool_name: str = ""

    def __init__(
        self,
        runner: ScriptRunner,
        config: MusicConfig,
        error_handler: Optional[ErrorHandler] = None,
    ):
        self.runner = runner
        self.config = config
        self.errors = error_handler or ErrorHandler()
        self._logger = logging.getLogger(f"music_mcp.tools.{self.tool_name or 'handler'}")

    async def handle(self, params) -> ResponseEnvelope:
        """Run the tool; input errors become failure envelopes."""
        try:
            return await self.execute(params)
        except MusicMCPError as e:
            return self.errors.handle(ToolError.from_exception(e, self.tool_name))

    @abstractmethod
    async def execute(self, params) -> ResponseEnvelope:
        """Run the tool for validated input."""

    async def run_script(
        self,
        script: ScriptRef,
        args: Sequence[str] = (),
        timeout_ms: Optional[int] = None,
    ) -> ScriptOutput:
        result = await self.runner.run(script, args, timeout_ms or self.config.timeout_ms)
        return ScriptOutput.from_result(result)

    def failure_message(self, reason: str, params) -> str:
        """Caller-visible message for a failed script call."""
        return reason

    def fail(self, output: ScriptOutput, params) -> ResponseEnvelope:
        """
        Envelope for a failed script call.

        Marker output is surfaced verbatim as both message and error;
        process failures get the tool's own message around the reason.
        """
        if output.is_marker:
            message = output.reason
        else:
            message = self.failure_message(output.reason, params)

        error = ToolError(
            category=output.category,
            message=message,
            tag=output.reason,
            tool_name=self.tool_name,
            details={"script": output.script},
        )
        return self.errors.handle(error)

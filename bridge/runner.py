"""
Script Runner
-------------
Bounded execution of automation scripts through an external interpreter
(``osascript`` on macOS).

Rules:
- Arguments travel as separate argv entries, never through a shell and
  never spliced into script source, so quotes in a search query or a
  playlist name stay data
- Every process gets its own timeout; on expiry the whole process group
  is killed and reaped
- Failures come back as ExecutionResult variants, never as exceptions
- No JSON parsing here; callers decide how to read stdout
"""

from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import List, Optional, Sequence
import asyncio
import logging
import os
import signal
import time

from .scripts import BUNDLED_SCRIPTS_DIR, ScriptRef

DEFAULT_TIMEOUT_MS = 30_000


class ExitKind(Enum):
    """How an external process ended."""
    SUCCESS = auto()
    NON_ZERO_EXIT = auto()
    TIMEOUT = auto()
    SPAWN_FAILURE = auto()


@dataclass
class ExecutionResult:
    """Result of one external process invocation."""
    script: str
    exit_kind: ExitKind
    stdout: str = ""
    stderr: str = ""
    returncode: Optional[int] = None
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    execution_time_ms: float = 0.0
    spawn_error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.exit_kind == ExitKind.SUCCESS

    @property
    def error_message(self) -> str:
        """Caller-visible description of a failure."""
        if self.exit_kind == ExitKind.TIMEOUT:
            return f"AppleScript execution timed out after {self.timeout_ms}ms"
        if self.exit_kind == ExitKind.NON_ZERO_EXIT:
            detail = self.stderr or f"exit status {self.returncode}"
            return f"AppleScript execution failed: {detail}"
        if self.exit_kind == ExitKind.SPAWN_FAILURE:
            return f"AppleScript could not be started: {self.spawn_error}"
        return ""

    def __repr__(self) -> str:
        status = "✓" if self.success else "✗"
        return f"ExecutionResult({status} {self.script}: {self.exit_kind.name})"


class ScriptRunner:
    """
    Launches one interpreter process per script call.

    Safe to share between concurrent tool calls: it holds no per-call
    state, each call owns its subprocess and its timer.
    """

    KILL_GRACE_SECONDS = 2.0

    def __init__(
        self,
        scripts_dir: Optional[Path] = None,
        interpreter: str = "osascript",
        default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
        health=None,
    ):
        self.scripts_dir = Path(scripts_dir) if scripts_dir else BUNDLED_SCRIPTS_DIR
        self.interpreter = interpreter
        self.default_timeout_ms = default_timeout_ms
        self._health = health
        self._logger = logging.getLogger("music_mcp.bridge.runner")

    def build_argv(self, script: ScriptRef, args: Sequence[str] = ()) -> List[str]:
        """Command line for a script call; one argv entry per argument."""
        return [self.interpreter, str(script.resolve(self.scripts_dir)), *(str(a) for a in args)]

    async def run(
        self,
        script: ScriptRef,
        args: Sequence[str] = (),
        timeout_ms: Optional[int] = None,
    ) -> ExecutionResult:
        """
        Run a script and wait for it, suspending only the calling task.

        Args:
            script: Which automation script to run
            args: String arguments, passed through verbatim
            timeout_ms: Per-call override of the default timeout

        Returns:
            ExecutionResult; stdout is trimmed
        """
        timeout_ms = timeout_ms or self.default_timeout_ms
        start = time.monotonic()
        result = await self._run(script, args, timeout_ms)
        result.execution_time_ms = (time.monotonic() - start) * 1000

        if self._health is not None:
            self._health.record_call(script.name, result.execution_time_ms, is_error=not result.success)

        if result.success:
            self._logger.debug(f"Script {script.name} finished in {result.execution_time_ms:.0f}ms")
        else:
            self._logger.warning(f"Script {script.name} failed: {result.error_message}")
        return result

    async def _run(self, script: ScriptRef, args: Sequence[str], timeout_ms: int) -> ExecutionResult:
        script_path = script.resolve(self.scripts_dir)
        if not script_path.is_file():
            return ExecutionResult(
                script=script.name,
                exit_kind=ExitKind.SPAWN_FAILURE,
                timeout_ms=timeout_ms,
                spawn_error=f"script not found: {script_path}",
            )

        argv = self.build_argv(script, args)
        self._logger.debug(f"Starting {script.name} with {len(argv) - 2} argument(s)")

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=True,
            )
        except (OSError, ValueError) as e:
            return ExecutionResult(
                script=script.name,
                exit_kind=ExitKind.SPAWN_FAILURE,
                timeout_ms=timeout_ms,
                spawn_error=f"{self.interpreter}: {e}",
            )

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout_ms / 1000)
        except asyncio.TimeoutError:
            await self._kill(process)
            return ExecutionResult(
                script=script.name,
                exit_kind=ExitKind.TIMEOUT,
                timeout_ms=timeout_ms,
            )
        except asyncio.CancelledError:
            await self._kill(process)
            raise

        stdout_text = stdout.decode("utf-8", "replace").strip() if stdout else ""
        stderr_text = stderr.decode("utf-8", "replace").strip() if stderr else ""

        return ExecutionResult(
            script=script.name,
            exit_kind=ExitKind.SUCCESS if process.returncode == 0 else ExitKind.NON_ZERO_EXIT,
            stdout=stdout_text,
            stderr=stderr_text,
            returncode=process.returncode,
            timeout_ms=timeout_ms,
        )

    async def _kill(self, process: asyncio.subprocess.Process) -> None:
        """Kill the process group, then drain pipes and reap."""
        if process.returncode is None:
            try:
                if hasattr(os, "killpg"):
                    os.killpg(process.pid, signal.SIGKILL)
                else:
                    process.kill()
            except ProcessLookupError:
                pass  # exited on its own in the meantime

        try:
            await asyncio.wait_for(process.communicate(), timeout=self.KILL_GRACE_SECONDS)
        except asyncio.TimeoutError:
            self._logger.warning(f"Process {process.pid} did not close its pipes after kill")
            await process.wait()

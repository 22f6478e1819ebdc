"""
Music MCP Test Configuration
----------------------------
Shared fixtures and configuration for all tests.

The StubRunner stands in for the real ScriptRunner: it never starts a
process, returns canned output per script, and counts every call so
tests can assert that nothing reached the automation layer.
"""

import asyncio
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from bridge.runner import ExecutionResult, ExitKind
from bridge.scripts import ScriptRef
from infra.config import MusicConfig
from infra.health import HealthMonitor
from tools.dispatcher import create_dispatcher


class StubRunner:
    """Counting stand-in for ScriptRunner."""

    def __init__(self):
        self.default_timeout_ms = 30_000
        self.calls: List[Tuple[str, List[str], Optional[int]]] = []
        self._responses: Dict[str, Union[str, ExecutionResult]] = {}
        self._delays: Dict[str, float] = {}

    def respond(self, script_name: str, stdout: str) -> "StubRunner":
        """Canned successful output for a script."""
        self._responses[script_name] = stdout
        return self

    def fail(
        self,
        script_name: str,
        exit_kind: ExitKind = ExitKind.NON_ZERO_EXIT,
        stderr: str = "",
        delay: float = 0.0,
    ) -> "StubRunner":
        """Make a script fail the given way, optionally after a delay."""
        self._responses[script_name] = ExecutionResult(
            script=script_name,
            exit_kind=exit_kind,
            stderr=stderr,
            returncode=1 if exit_kind == ExitKind.NON_ZERO_EXIT else None,
            spawn_error="osascript: not found" if exit_kind == ExitKind.SPAWN_FAILURE else None,
        )
        self._delays[script_name] = delay
        return self

    async def run(
        self,
        script: ScriptRef,
        args: Sequence[str] = (),
        timeout_ms: Optional[int] = None,
    ) -> ExecutionResult:
        timeout_ms = timeout_ms or self.default_timeout_ms
        self.calls.append((script.name, list(args), timeout_ms))

        if self._delays.get(script.name):
            await asyncio.sleep(self._delays[script.name])

        response = self._responses.get(script.name, "")
        if isinstance(response, ExecutionResult):
            response.timeout_ms = timeout_ms
            return response
        return ExecutionResult(script=script.name, exit_kind=ExitKind.SUCCESS, stdout=response)

    @property
    def call_count(self) -> int:
        return len(self.calls)

    @property
    def script_names(self) -> List[str]:
        return [name for name, _, _ in self.calls]


@pytest.fixture
def config() -> MusicConfig:
    """Default configuration with a known search cap."""
    return MusicConfig(max_search_results=50, timeout_seconds=30)


@pytest.fixture
def runner() -> StubRunner:
    return StubRunner()


@pytest.fixture
def health() -> HealthMonitor:
    return HealthMonitor()


@pytest.fixture
def dispatcher(config, runner, health):
    """Dispatcher wired to the stub runner."""
    return create_dispatcher(config, runner, health)

"""
Diagnostics
-----------
Handler for the info tool. Always succeeds: anything wrong with the
environment is listed under configurationIssues.
"""

from pathlib import Path
from typing import Optional
import shutil

from bridge import scripts
from core.envelope import ResponseEnvelope
from infra.config import validate_config
from infra.health import HealthMonitor
from infra.logging import get_log_file_path
from infra.version import get_version
from .base import ToolHandler
from .definitions import INFO


class DiagnosticsHandler(ToolHandler):
    """Server version, automation availability, logging and script health."""

    tool_name = INFO

    PROBE_TIMEOUT_MS = 5000

    def __init__(self, runner, config, error_handler=None, health: Optional[HealthMonitor] = None):
        super().__init__(runner, config, error_handler)
        self.health = health

    async def execute(self, params) -> ResponseEnvelope:
        self._logger.info("Handling info command")
        issues = validate_config(self.config)

        probe = await self.run_script(scripts.MUSIC_VERSION, timeout_ms=self.PROBE_TIMEOUT_MS)
        music_available = not probe.failed
        if not music_available:
            issues.append("Music app not accessible or not installed")

        applescript_available = shutil.which(self.config.interpreter) is not None
        if not applescript_available:
            issues.append(f"AppleScript ({self.config.interpreter}) not available")

        log_path = get_log_file_path() or Path(self.config.log_file)
        logger_status = "ok"
        if self.config.file_logging and not log_path.exists():
            logger_status = "error"
            issues.append(f"Log file not accessible: {log_path}")

        data = {
            "version": get_version(),
            "musicAppAvailable": music_available,
            "appleScriptAvailable": applescript_available,
            "loggerPath": str(log_path),
            "loggerStatus": logger_status,
            "configurationIssues": issues,
            "scriptHealth": self.health.get_summary() if self.health else {},
            "errorStats": self.errors.get_error_stats(),
        }
        return ResponseEnvelope.ok("Music MCP server diagnostics", data)

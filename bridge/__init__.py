# Bridge module - the automation layer seen from Python
# Scripts are opaque: a reference plus string arguments in, text out

from .runner import ScriptRunner, ExecutionResult, ExitKind, DEFAULT_TIMEOUT_MS
from .scripts import ScriptRef, ALL_SCRIPTS, BUNDLED_SCRIPTS_DIR

__all__ = [
    "ScriptRunner",
    "ExecutionResult",
    "ExitKind",
    "DEFAULT_TIMEOUT_MS",
    "ScriptRef",
    "ALL_SCRIPTS",
    "BUNDLED_SCRIPTS_DIR",
]

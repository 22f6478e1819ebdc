"""
Script Health
-------------
Per-script latency and error tracking, reported by the info tool and
the HTTP /health endpoint.

Design:
- Passive observability only (no retries, no auto-disable)
- One tracker per automation script, keyed by script name
- Owned by the server instance; there is no process-wide monitor
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, auto
from typing import Any, Dict, List, Optional
import logging
import threading


class HealthStatus(Enum):
    """Script health status."""
    HEALTHY = auto()     # Normal operation
    DEGRADED = auto()    # Some calls failing
    UNHEALTHY = auto()   # Most calls failing


@dataclass
class ScriptHealth:
    """Counters for a single automation script."""
    name: str
    status: HealthStatus = HealthStatus.HEALTHY
    last_call: Optional[datetime] = None
    total_calls: int = 0
    total_errors: int = 0
    total_latency_ms: float = 0.0
    _recent_latencies: List[float] = field(default_factory=list, repr=False)
    _max_recent: int = field(default=100, repr=False)

    @property
    def error_rate(self) -> float:
        if self.total_calls == 0:
            return 0.0
        return self.total_errors / self.total_calls

    @property
    def avg_latency_ms(self) -> float:
        if self.total_calls == 0:
            return 0.0
        return self.total_latency_ms / self.total_calls

    @property
    def latency_p99_ms(self) -> float:
        """p99 over the most recent samples."""
        if not self._recent_latencies:
            return 0.0
        ordered = sorted(self._recent_latencies)
        return ordered[min(int(len(ordered) * 0.99), len(ordered) - 1)]

    def record_call(self, latency_ms: float, is_error: bool = False) -> None:
        self.total_calls += 1
        self.total_latency_ms += latency_ms
        self.last_call = datetime.now(timezone.utc)

        self._recent_latencies.append(latency_ms)
        if len(self._recent_latencies) > self._max_recent:
            self._recent_latencies.pop(0)

        if is_error:
            self.total_errors += 1

        if self.error_rate >= 0.5:
            self.status = HealthStatus.UNHEALTHY
        elif self.error_rate >= 0.1:
            self.status = HealthStatus.DEGRADED
        else:
            self.status = HealthStatus.HEALTHY

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.name,
            "lastCall": self.last_call.isoformat() if self.last_call else None,
            "totalCalls": self.total_calls,
            "totalErrors": self.total_errors,
            "errorRate": round(self.error_rate, 4),
            "avgLatencyMs": round(self.avg_latency_ms, 2),
            "latencyP99Ms": round(self.latency_p99_ms, 2),
        }


class HealthMonitor:
    """Collects ScriptHealth for every script the runner has launched."""

    def __init__(self):
        self._scripts: Dict[str, ScriptHealth] = {}
        self._lock = threading.Lock()
        self._logger = logging.getLogger("music_mcp.health")

    def record_call(self, script: str, latency_ms: float, is_error: bool = False) -> None:
        with self._lock:
            health = self._scripts.setdefault(script, ScriptHealth(name=script))
            previous = health.status
            health.record_call(latency_ms, is_error)
            status = health.status
            error_rate = health.error_rate

        if status != previous:
            self._logger.warning(
                f"Script {script} is {status.name} (error_rate={error_rate:.2%})"
            )

    def get(self, script: str) -> Optional[ScriptHealth]:
        with self._lock:
            return self._scripts.get(script)

    def is_healthy(self) -> bool:
        with self._lock:
            return all(h.status == HealthStatus.HEALTHY for h in self._scripts.values())

    def get_summary(self) -> Dict[str, Any]:
        """Overall status plus per-script counters."""
        with self._lock:
            statuses = [h.status for h in self._scripts.values()]
            if HealthStatus.UNHEALTHY in statuses:
                overall = HealthStatus.UNHEALTHY
            elif HealthStatus.DEGRADED in statuses:
                overall = HealthStatus.DEGRADED
            else:
                overall = HealthStatus.HEALTHY

            return {
                "overallStatus": overall.name,
                "scripts": {name: h.to_dict() for name, h in self._scripts.items()},
            }

    def reset(self) -> None:
        with self._lock:
            self._scripts.clear()

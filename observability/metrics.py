from __future__ import annotations

import threading
import time
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, List

OUTCOMES = ("ok", "api_error", "transport_error", "error")


@dataclass
class _ToolStats:
    outcomes: Counter = field(default_factory=Counter)
    latencies_ms: List[float] = field(default_factory=list)

    def summary(self) -> Dict[str, Any]:
        lat = self.latencies_ms
        return {
            "calls": sum(self.outcomes.values()),
            "outcomes": dict(self.outcomes),
            "avg_ms": round(sum(lat) / len(lat), 3) if lat else 0.0,
            "max_ms": round(max(lat), 3) if lat else 0.0,
        }


class Metrics:
    """
    Per-tool call counts by outcome plus latency, for one adapter process.

    Nothing is exported over the wire; `snapshot()` feeds the shutdown log
    line and tests.
    """

    # latencies kept per tool; older samples are dropped
    MAX_SAMPLES = 1000

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tools: Dict[str, _ToolStats] = defaultdict(_ToolStats)
        self._started_at = time.time()

    def record_tool_call(self, tool: str, *, outcome: str, elapsed_ms: float) -> None:
        if outcome not in OUTCOMES:
            raise ValueError(f"unknown outcome: {outcome}")
        with self._lock:
            stats = self._tools[tool]
            stats.outcomes[outcome] += 1
            stats.latencies_ms.append(float(elapsed_ms))
            del stats.latencies_ms[: -self.MAX_SAMPLES]

    def count(self, tool: str, outcome: str) -> int:
        with self._lock:
            stats = self._tools.get(tool)
            return stats.outcomes[outcome] if stats else 0

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            tools = {name: stats.summary() for name, stats in sorted(self._tools.items())}
        return {"uptime_sec": int(time.time() - self._started_at), "tools": tools}

"""
Tool execution metrics.

Running per-tool totals (calls, duration, errors) for operational logging
and end-of-turn diagnostics.  Callers measure the duration themselves and
report it after each invocation.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Dict, List


@dataclass
class ToolStats:
    """Accumulated totals for one tool."""

    count: int = 0
    total_duration_ms: float = 0.0
    errors: int = 0

    @property
    def average_duration_ms(self) -> float:
        if self.count == 0:
            return 0.0
        return self.total_duration_ms / self.count

    def to_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "total_duration_ms": self.total_duration_ms,
            "average_duration_ms": self.average_duration_ms,
            "errors": self.errors,
        }


class ToolExecutionMetrics:
    """Thread-safe accumulator keyed by tool name, in first-seen order."""

    def __init__(self) -> None:
        self._tools: Dict[str, ToolStats] = {}
        self._lock = threading.Lock()

    @property
    def tools(self) -> Dict[str, ToolStats]:
        """Copy of the per-tool stats."""
        with self._lock:
            return {
                name: ToolStats(stats.count, stats.total_duration_ms, stats.errors)
                for name, stats in self._tools.items()
            }

    def record(self, name: str, duration_ms: float, is_error: bool) -> None:
        """Account for one finished invocation of *name*."""
        with self._lock:
            stats = self._tools.get(name)
            if stats is None:
                stats = self._tools[name] = ToolStats()
            stats.count += 1
            stats.total_duration_ms += duration_ms
            if is_error:
                stats.errors += 1

    def get_summary(self) -> str:
        """One line per tool; ``""`` if nothing has been recorded."""
        with self._lock:
            lines: List[str] = []
            for name, stats in self._tools.items():
                line = f"{name}: {stats.count} calls, avg {stats.average_duration_ms:.0f}ms"
                if stats.errors:
                    line += f", {stats.errors} errors"
                lines.append(line)
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {name: stats.to_dict() for name, stats in self.tools.items()}

    def __len__(self) -> int:
        with self._lock:
            return len(self._tools)


def create_tool_execution_metrics() -> ToolExecutionMetrics:
    return ToolExecutionMetrics()

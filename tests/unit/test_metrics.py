"""
Unit tests for ToolExecutionMetrics.
"""

import threading

from service.tool_policy.metrics import (
    ToolExecutionMetrics,
    ToolStats,
    create_tool_execution_metrics,
)


class TestToolExecutionMetrics:
    """Recording and summaries."""

    def test_tracks_executions(self) -> None:
        metrics = create_tool_execution_metrics()
        metrics.record("web_search", 150, False)
        metrics.record("web_search", 200, False)
        metrics.record("web_fetch", 500, True)

        tools = metrics.tools
        assert tools["web_search"].count == 2
        assert tools["web_search"].errors == 0
        assert tools["web_search"].total_duration_ms == 350
        assert tools["web_fetch"].count == 1
        assert tools["web_fetch"].errors == 1

    def test_first_seen_order(self) -> None:
        metrics = ToolExecutionMetrics()
        metrics.record("b", 1, False)
        metrics.record("a", 1, False)
        metrics.record("b", 1, False)
        assert list(metrics.tools) == ["b", "a"]

    def test_summary(self) -> None:
        metrics = create_tool_execution_metrics()
        metrics.record("web_search", 150, False)
        metrics.record("web_search", 200, False)
        metrics.record("web_fetch", 500, True)
        assert metrics.get_summary().splitlines() == [
            "web_search: 2 calls, avg 175ms",
            "web_fetch: 1 calls, avg 500ms, 1 errors",
        ]

    def test_summary_single_call(self) -> None:
        metrics = create_tool_execution_metrics()
        metrics.record("web_search", 150, False)
        summary = metrics.get_summary()
        assert "web_search" in summary
        assert "1 calls" in summary

    def test_empty_summary_is_empty_string(self) -> None:
        assert create_tool_execution_metrics().get_summary() == ""

    def test_tools_returns_copy(self) -> None:
        metrics = create_tool_execution_metrics()
        metrics.record("x", 1, False)
        snapshot = metrics.tools
        snapshot["x"].count = 99
        assert metrics.tools["x"].count == 1

    def test_to_dict(self) -> None:
        metrics = create_tool_execution_metrics()
        metrics.record("x", 10, False)
        metrics.record("x", 30, True)
        assert metrics.to_dict() == {
            "x": {
                "count": 2,
                "total_duration_ms": 40,
                "average_duration_ms": 20,
                "errors": 1,
            }
        }
        assert len(metrics) == 1

    def test_concurrent_records(self) -> None:
        metrics = create_tool_execution_metrics()

        def worker() -> None:
            for _ in range(500):
                metrics.record("web_search", 1, False)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert metrics.tools["web_search"].count == 4000
        assert metrics.tools["web_search"].total_duration_ms == 4000


class TestToolStats:
    def test_average_of_empty(self) -> None:
        assert ToolStats().average_duration_ms == 0.0

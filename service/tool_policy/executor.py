"""
Guarded tool execution

Runs a tool only after the session's policy matcher has approved its name,
enforces an optional timeout, and feeds the outcome into
:class:`ToolExecutionMetrics`.

Example:
    executor = GuardedToolExecutor(
        matcher=resolve_effective_policy(session_policy),
        metrics=app_metrics,
        timeout_ms=30_000,
    )
    result = await executor.execute("web_search", search_web, query="python")
    if not result.permitted:
        ...
"""
import asyncio
import inspect
import logging
import time
from typing import Any, Callable, Optional

from pydantic import BaseModel, Field

from service.tool_policy.metrics import ToolExecutionMetrics
from service.tool_policy.policy import ToolPolicyMatcher

logger = logging.getLogger(__name__)


class ToolCallResult(BaseModel):
    """Outcome of one guarded tool call"""
    tool_name: str
    success: bool
    permitted: bool = True
    output: Any = None
    error: Optional[str] = None
    duration_ms: float = Field(default=0.0, description="Wall time of the tool call")


def not_permitted_message(tool_name: str) -> str:
    return f"Tool '{tool_name}' is not permitted by the active tool policy"


class GuardedToolExecutor:
    """
    Policy-gated tool runner

    Denied names short-circuit before the tool function is touched, so its
    side effects never run.  Permitted calls are always recorded in the
    metrics, whether they succeed, fail, or time out.
    """

    def __init__(
        self,
        matcher: ToolPolicyMatcher,
        metrics: Optional[ToolExecutionMetrics] = None,
        timeout_ms: Optional[int] = None,
    ):
        self.matcher = matcher
        self.metrics = metrics
        # None disables the timeout; 0 expires immediately.
        self.timeout_ms = timeout_ms

    async def _invoke(self, func: Callable[..., Any], **kwargs) -> Any:
        if inspect.iscoroutinefunction(func):
            return await func(**kwargs)
        result = await asyncio.to_thread(func, **kwargs)
        if inspect.isawaitable(result):
            return await result
        return result

    async def execute(self, tool_name: str, func: Callable[..., Any], **kwargs) -> ToolCallResult:
        """
        Run *func* as tool *tool_name* if the policy permits it.

        Args:
            tool_name: Name checked against the policy.
            func: Sync or async callable implementing the tool.
            **kwargs: Tool arguments.

        Returns:
            ToolCallResult; tool exceptions and timeouts are reported in it,
            not raised.
        """
        if not self.matcher(tool_name):
            logger.warning("Blocked tool call: %s (not permitted)", tool_name)
            return ToolCallResult(
                tool_name=tool_name,
                success=False,
                permitted=False,
                error=not_permitted_message(tool_name),
            )

        timeout = self.timeout_ms / 1000 if self.timeout_ms is not None else None
        started = time.perf_counter()
        output = None
        error: Optional[str] = None
        try:
            output = await asyncio.wait_for(self._invoke(func, **kwargs), timeout=timeout)
        except asyncio.TimeoutError:
            error = f"Tool '{tool_name}' timed out after {self.timeout_ms}ms"
            logger.warning(error)
        except Exception as e:
            error = f"{type(e).__name__}: {e}"
            logger.exception("Tool %s failed", tool_name)
        duration_ms = (time.perf_counter() - started) * 1000

        if self.metrics is not None:
            self.metrics.record(tool_name, duration_ms, error is not None)

        return ToolCallResult(
            tool_name=tool_name,
            success=error is None,
            output=output,
            error=error,
            duration_ms=duration_ms,
        )

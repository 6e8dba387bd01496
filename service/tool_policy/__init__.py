"""
Tool Policy Engine

Deny-first tool access control built from groups, profiles, explicit
allow/alsoAllow/deny overrides and ``*`` wildcards, plus per-tool
execution metrics.

Exports:
    compile_pattern / compile_patterns / matches_any – Pattern compiler.
    TOOL_GROUPS / expand_tool_groups                 – Group directory.
    ToolProfile / TOOL_PROFILES / resolve_profile_allow_list – Profiles.
    make_tool_policy_matcher / resolve_effective_policy /
    filter_tools_by_policy / ToolPolicyEngine        – Policy evaluation.
    ToolPolicyConfig / resolve_tool_policy           – Policy models.
    ToolExecutionMetrics / create_tool_execution_metrics – Metrics.
    GuardedToolExecutor / ToolCallResult             – Policy-gated execution.
"""

from service.tool_policy.executor import (
    GuardedToolExecutor,
    ToolCallResult,
)
from service.tool_policy.groups import (
    TOOL_GROUPS,
    ToolGroupInfo,
    describe_tool_groups,
    expand_tool_groups,
    summarize_tool_names,
)
from service.tool_policy.metrics import (
    ToolExecutionMetrics,
    ToolStats,
    create_tool_execution_metrics,
)
from service.tool_policy.models import (
    ProviderToolPolicy,
    ToolPolicyConfig,
    resolve_tool_policy,
)
from service.tool_policy.patterns import (
    CompiledPattern,
    PatternKind,
    compile_pattern,
    compile_patterns,
    matches_any,
)
from service.tool_policy.policy import (
    ToolPolicyEngine,
    filter_tools_by_policy,
    make_tool_policy_matcher,
    resolve_effective_policy,
)
from service.tool_policy.profiles import (
    TOOL_PROFILES,
    ToolProfile,
    resolve_profile_allow_list,
)

__all__ = [
    "CompiledPattern",
    "PatternKind",
    "compile_pattern",
    "compile_patterns",
    "matches_any",
    "TOOL_GROUPS",
    "ToolGroupInfo",
    "describe_tool_groups",
    "expand_tool_groups",
    "summarize_tool_names",
    "TOOL_PROFILES",
    "ToolProfile",
    "resolve_profile_allow_list",
    "ToolPolicyEngine",
    "filter_tools_by_policy",
    "make_tool_policy_matcher",
    "resolve_effective_policy",
    "ProviderToolPolicy",
    "ToolPolicyConfig",
    "resolve_tool_policy",
    "ToolExecutionMetrics",
    "ToolStats",
    "create_tool_execution_metrics",
    "GuardedToolExecutor",
    "ToolCallResult",
]

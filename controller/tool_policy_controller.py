"""
Tool Policy Controller.

Provides REST API endpoints for evaluating tool access policies:
- GET  /api/tool-policy/groups           - List tool groups
- GET  /api/tool-policy/groups/{name}    - Get one group
- POST /api/tool-policy/groups/request   - Load groups mid-conversation
- GET  /api/tool-policy/profiles         - List profiles
- GET  /api/tool-policy/profiles/{name}  - Get one profile
- POST /api/tool-policy/check            - Decide per tool name
- POST /api/tool-policy/filter           - Permitted subset of tool names
- GET  /api/tool-policy/metrics          - Execution metrics snapshot
- POST /api/tool-policy/metrics/record   - Record one finished tool call

Request policies are merged over the server defaults (environment) before
evaluation.
"""

from logging import getLogger
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from service.tool_policy.groups import (
    GROUP_PREFIX,
    TOOL_GROUPS,
    describe_tool_groups,
    parse_requested_groups,
    summarize_tool_names,
)
from service.tool_policy.metrics import ToolExecutionMetrics
from service.tool_policy.models import ToolPolicyConfig, resolve_tool_policy
from service.tool_policy.policy import ToolPolicyEngine
from service.tool_policy.profiles import (
    TOOL_PROFILES,
    parse_profile,
    resolve_profile_allow_list,
)
from service.tool_policy.settings import ToolPolicySettings

logger = getLogger(__name__)

router = APIRouter(prefix="/api/tool-policy", tags=["tool-policy"])


# Pydantic models for API
class PolicyEvaluationRequest(BaseModel):
    """Request body for check / filter"""
    policy: Optional[ToolPolicyConfig] = Field(default=None, description="Session policy")
    tool_names: List[str] = Field(default_factory=list, description="Candidate tool names")
    provider: Optional[str] = Field(default=None, description="Model provider for byProvider overrides")


class PolicyCheckResponse(BaseModel):
    """Response for check"""
    decisions: Dict[str, bool]
    unrestricted: bool


class PolicyFilterResponse(BaseModel):
    """Response for filter"""
    allowed: List[str]
    removed: List[str]
    summary: str


class GroupRequestBody(BaseModel):
    """Request body for loading tool groups mid-conversation"""
    groups: str = Field(..., description="Comma-separated group names")
    loaded_tools: List[str] = Field(default_factory=list, description="Tools already available")
    policy: Optional[ToolPolicyConfig] = None
    provider: Optional[str] = None


class GroupRequestResponse(BaseModel):
    """Response for group loading"""
    loaded: List[str]
    already_loaded: List[str]
    invalid_groups: List[str]
    tool_names: List[str]
    hint: str


class MetricsRecordRequest(BaseModel):
    """Request body for recording a finished tool call"""
    tool_name: str = Field(..., min_length=1)
    duration_ms: float = Field(..., ge=0)
    is_error: bool = False


class MetricsResponse(BaseModel):
    """Response for metrics"""
    tools: Dict[str, Dict[str, Any]]
    summary: str


# Dependencies
def get_policy_settings(request: Request) -> ToolPolicySettings:
    settings = getattr(request.app.state, "tool_policy_settings", None)
    if settings is None:
        settings = ToolPolicySettings.from_env()
        request.app.state.tool_policy_settings = settings
    return settings


def get_tool_metrics(request: Request) -> ToolExecutionMetrics:
    metrics = getattr(request.app.state, "tool_metrics", None)
    if metrics is None:
        metrics = ToolExecutionMetrics()
        request.app.state.tool_metrics = metrics
    return metrics


def _engine_for(body: PolicyEvaluationRequest, settings: ToolPolicySettings) -> ToolPolicyEngine:
    policy = resolve_tool_policy(body.policy, settings.default_policy())
    return ToolPolicyEngine.for_config(policy, provider=body.provider)


@router.get("/groups")
async def list_groups():
    """
    List all tool groups with their members.
    """
    return {"groups": [info.to_dict() for info in describe_tool_groups()]}


@router.get("/groups/{group_name}")
async def get_group(group_name: str):
    """
    Get a single group by bare name (``web``) or key (``group:web``).
    """
    key = group_name if group_name.startswith(GROUP_PREFIX) else GROUP_PREFIX + group_name
    members = TOOL_GROUPS.get(key)
    if members is None:
        raise HTTPException(status_code=404, detail=f"Tool group not found: {group_name}")
    return {"name": key[len(GROUP_PREFIX):], "tool_names": list(members)}


@router.post("/groups/request", response_model=GroupRequestResponse)
async def request_groups(
    body: GroupRequestBody,
    settings: ToolPolicySettings = Depends(get_policy_settings),
):
    """
    Resolve a ``request_tools`` call: which groups become loaded and which
    of their tools the policy lets the agent use.
    """
    valid, invalid = parse_requested_groups(body.groups)
    loaded_before = {info.name for info in describe_tool_groups(body.loaded_tools) if info.loaded}

    newly_loaded = [name for name in valid if name not in loaded_before]
    already_loaded = [name for name in valid if name in loaded_before]

    engine = ToolPolicyEngine.for_config(
        resolve_tool_policy(body.policy, settings.default_policy()),
        provider=body.provider,
    )
    candidates: List[str] = []
    for name in newly_loaded:
        for tool_name in TOOL_GROUPS[GROUP_PREFIX + name]:
            if tool_name not in body.loaded_tools and tool_name not in candidates:
                candidates.append(tool_name)
    tool_names = engine.filter_tool_names(candidates)

    if newly_loaded:
        hint = (
            f"Groups loaded: {', '.join(newly_loaded)}. "
            "The tools from these groups are now available in your next tool call."
        )
    else:
        hint = "All requested groups were already loaded."
    if invalid:
        hint += f" Ignored invalid groups: {', '.join(invalid)}."

    return GroupRequestResponse(
        loaded=newly_loaded,
        already_loaded=already_loaded,
        invalid_groups=invalid,
        tool_names=tool_names,
        hint=hint,
    )


@router.get("/profiles")
async def list_profiles():
    """
    List profiles with their raw tokens and expanded tool names.

    ``full`` expands to an empty list, meaning no restriction.
    """
    return {
        "profiles": {
            profile.value: {
                "tokens": list(tokens),
                "tool_names": resolve_profile_allow_list(profile),
                "unrestricted": not tokens,
            }
            for profile, tokens in TOOL_PROFILES.items()
        }
    }


@router.get("/profiles/{profile_name}")
async def get_profile(profile_name: str):
    """
    Get a single profile.
    """
    profile = parse_profile(profile_name)
    if profile is None:
        raise HTTPException(status_code=404, detail=f"Tool profile not found: {profile_name}")
    tokens = TOOL_PROFILES[profile]
    return {
        "name": profile.value,
        "tokens": list(tokens),
        "tool_names": resolve_profile_allow_list(profile),
        "unrestricted": not tokens,
    }


@router.post("/check", response_model=PolicyCheckResponse)
async def check_tools(
    body: PolicyEvaluationRequest,
    settings: ToolPolicySettings = Depends(get_policy_settings),
):
    """
    Decide, for each tool name, whether the policy permits it.
    """
    engine = _engine_for(body, settings)
    return PolicyCheckResponse(
        decisions=engine.check(body.tool_names),
        unrestricted=engine.is_unrestricted,
    )


@router.post("/filter", response_model=PolicyFilterResponse)
async def filter_tools(
    body: PolicyEvaluationRequest,
    settings: ToolPolicySettings = Depends(get_policy_settings),
):
    """
    Return the permitted subset of tool names, preserving input order.
    """
    engine = _engine_for(body, settings)
    allowed = engine.filter_tool_names(body.tool_names)
    allowed_set = set(allowed)
    removed = [name for name in body.tool_names if name not in allowed_set]
    return PolicyFilterResponse(
        allowed=allowed,
        removed=removed,
        summary=summarize_tool_names(allowed),
    )


@router.get("/metrics", response_model=MetricsResponse)
async def get_metrics(metrics: ToolExecutionMetrics = Depends(get_tool_metrics)):
    """
    Snapshot of per-tool execution metrics.
    """
    return MetricsResponse(tools=metrics.to_dict(), summary=metrics.get_summary())


@router.post("/metrics/record", response_model=MetricsResponse)
async def record_metric(
    body: MetricsRecordRequest,
    metrics: ToolExecutionMetrics = Depends(get_tool_metrics),
):
    """
    Record one finished tool call (duration measured by the caller).
    """
    metrics.record(body.tool_name, body.duration_ms, body.is_error)
    logger.debug("Recorded tool call: %s (%.1fms, error=%s)", body.tool_name, body.duration_ms, body.is_error)
    return MetricsResponse(tools=metrics.to_dict(), summary=metrics.get_summary())

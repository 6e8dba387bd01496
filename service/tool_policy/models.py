"""
Data models for tool policies

Session / agent level policy configuration, plus the layered merge that
combines an agent's own policy with the server-wide defaults.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProviderToolPolicy(BaseModel):
    """
    Per-provider override

    Every field is optional; ``None`` means "inherit from the base policy".
    """
    model_config = ConfigDict(populate_by_name=True)

    profile: Optional[str] = Field(default=None, description="Profile name override")
    allow: Optional[List[str]] = Field(default=None, description="Explicit allow tokens")
    also_allow: Optional[List[str]] = Field(
        default=None,
        alias="alsoAllow",
        description="Tokens added on top of the profile defaults",
    )
    deny: Optional[List[str]] = Field(default=None, description="Deny tokens (always win)")


class ToolPolicyConfig(BaseModel):
    """
    Tool policy for one session or request

    Tokens are tool names, ``group:<name>`` references or ``*`` globs.

    Example:
        {
            "profile": "minimal",
            "alsoAllow": ["web_search"],
            "deny": ["canvas_*"]
        }
    """
    model_config = ConfigDict(populate_by_name=True)

    profile: Optional[str] = Field(
        default=None,
        description="Default profile (minimal, coding, messaging, full)"
    )
    allow: List[str] = Field(
        default_factory=list,
        description="Explicit allow list; when non-empty it replaces the profile"
    )
    also_allow: List[str] = Field(
        default_factory=list,
        alias="alsoAllow",
        description="Additional tokens merged into the profile's defaults"
    )
    deny: List[str] = Field(
        default_factory=list,
        description="Deny list, evaluated before allow"
    )
    by_provider: Dict[str, ProviderToolPolicy] = Field(
        default_factory=dict,
        alias="byProvider",
        description="Per model-provider overrides"
    )

    def for_provider(self, provider: Optional[str]) -> "ToolPolicyConfig":
        """Overlay the *provider* entry (if any) onto the base fields."""
        entry = self.by_provider.get(provider) if provider else None
        update: Dict[str, object] = {"by_provider": {}}
        if entry is not None:
            for name in ("profile", "allow", "also_allow", "deny"):
                value = getattr(entry, name)
                if value is not None:
                    update[name] = list(value) if isinstance(value, list) else value
        return self.model_copy(update=update)


def _merge_provider_entries(
    defaults: Dict[str, ProviderToolPolicy],
    overrides: Dict[str, ProviderToolPolicy],
) -> Dict[str, ProviderToolPolicy]:
    merged: Dict[str, ProviderToolPolicy] = {
        key: value.model_copy(deep=True) for key, value in defaults.items()
    }
    for key, value in overrides.items():
        base = merged.get(key)
        if base is None:
            merged[key] = value.model_copy(deep=True)
            continue
        merged[key] = ProviderToolPolicy(
            profile=value.profile if value.profile is not None else base.profile,
            allow=list(value.allow) if value.allow is not None else base.allow,
            also_allow=list(value.also_allow) if value.also_allow is not None else base.also_allow,
            deny=list(value.deny) if value.deny is not None else base.deny,
        )
    return merged


def resolve_tool_policy(
    agent_policy: Optional[ToolPolicyConfig],
    default_policy: Optional[ToolPolicyConfig],
) -> ToolPolicyConfig:
    """
    Merge an agent policy over the defaults, field by field.

    A field of *agent_policy* wins when it was explicitly set (pydantic's
    ``model_fields_set``); otherwise the default's value is used.
    ``by_provider`` entries are merged key-wise.
    """
    agent = agent_policy or ToolPolicyConfig()
    defaults = default_policy or ToolPolicyConfig()
    explicit = agent.model_fields_set

    def pick(name: str):
        if name in explicit and getattr(agent, name) is not None:
            value = getattr(agent, name)
        else:
            value = getattr(defaults, name)
        return list(value) if isinstance(value, list) else value

    return ToolPolicyConfig(
        profile=pick("profile"),
        allow=pick("allow"),
        also_allow=pick("also_allow"),
        deny=pick("deny"),
        by_provider=_merge_provider_entries(defaults.by_provider, agent.by_provider),
    )

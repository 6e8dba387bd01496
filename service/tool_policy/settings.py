"""
Tool policy settings

Server-wide defaults read from environment variables (``.env`` is loaded by
``main.py`` before this module is consulted).

    TOOL_POLICY_PROFILE     default profile (minimal, coding, messaging, full)
    TOOL_POLICY_ALLOW       comma-separated allow tokens
    TOOL_POLICY_ALSO_ALLOW  comma-separated tokens added to the profile
    TOOL_POLICY_DENY        comma-separated deny tokens
    TOOL_TIMEOUT_MS         per-call timeout for guarded execution
    LOG_LEVEL               logging level name
"""
import logging
import os
from typing import List, Mapping, Optional

from pydantic import BaseModel, Field

from service.tool_policy.models import ToolPolicyConfig

logger = logging.getLogger(__name__)

DEFAULT_TOOL_TIMEOUT_MS = 30_000


def split_tokens(raw: Optional[str]) -> List[str]:
    """``"a, b,,c"`` -> ``["a", "b", "c"]``"""
    if not raw:
        return []
    return [token.strip() for token in raw.split(",") if token.strip()]


def _int_env(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid %s=%r, using default %d", key, raw, default)
        return default


class ToolPolicySettings(BaseModel):
    """Environment-derived defaults"""
    profile: Optional[str] = None
    allow: List[str] = Field(default_factory=list)
    also_allow: List[str] = Field(default_factory=list)
    deny: List[str] = Field(default_factory=list)
    tool_timeout_ms: int = DEFAULT_TOOL_TIMEOUT_MS
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "ToolPolicySettings":
        env = os.environ if env is None else env
        return cls(
            profile=(env.get("TOOL_POLICY_PROFILE") or "").strip() or None,
            allow=split_tokens(env.get("TOOL_POLICY_ALLOW")),
            also_allow=split_tokens(env.get("TOOL_POLICY_ALSO_ALLOW")),
            deny=split_tokens(env.get("TOOL_POLICY_DENY")),
            tool_timeout_ms=_int_env(env, "TOOL_TIMEOUT_MS", DEFAULT_TOOL_TIMEOUT_MS),
            log_level=(env.get("LOG_LEVEL") or "INFO").strip().upper(),
        )

    def default_policy(self) -> ToolPolicyConfig:
        """Defaults that per-request policies are merged over."""
        return ToolPolicyConfig(
            profile=self.profile,
            allow=list(self.allow),
            also_allow=list(self.also_allow),
            deny=list(self.deny),
        )

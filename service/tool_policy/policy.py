"""
Tool Policy Engine — deny-first tool access control.

Design goals
~~~~~~~~~~~~
1. A session names a **profile** (minimal, coding, messaging, full) that
   supplies a default allow-set.
2. An explicit ``allow`` list **replaces** the profile; ``alsoAllow`` **adds**
   to it.
3. ``deny`` is evaluated first and always wins.
4. Tokens are tool names, ``group:<name>`` references or ``*`` globs, compiled
   once per policy and reused for every lookup.

Public API
~~~~~~~~~~
* ``make_tool_policy_matcher(allow, deny)`` → ``(name) -> bool``.
* ``resolve_effective_policy(config)`` → matcher for a layered policy.
* ``filter_tools_by_policy(names, config)`` → permitted subset, order kept.
* ``ToolPolicyEngine.for_config(config)`` → session-scoped wrapper with
  logging.
"""

from __future__ import annotations

from logging import getLogger
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Union,
)

from service.tool_policy.groups import expand_tool_groups
from service.tool_policy.models import ToolPolicyConfig
from service.tool_policy.patterns import compile_patterns, matches_any
from service.tool_policy.profiles import (
    TOOL_PROFILES,
    ToolProfile,
    parse_profile,
    resolve_profile_allow_list,
)

logger = getLogger(__name__)

ToolPolicyMatcher = Callable[[str], bool]
PolicyLike = Union[ToolPolicyConfig, Mapping[str, Any], None]


# ---------------------------------------------------------------------------
# Matcher
# ---------------------------------------------------------------------------

def _allow_everything(name: str) -> bool:
    return True


def make_tool_policy_matcher(
    allow_tokens: Optional[Sequence[str]] = None,
    deny_tokens: Optional[Sequence[str]] = None,
) -> ToolPolicyMatcher:
    """Build a deny-first matcher.

    1. Both compiled sets empty → every name is permitted.
    2. Name matches deny → rejected.
    3. Allow patterns empty → accepted (deny-only policy).
    4. Name matches allow → accepted, otherwise rejected.

    Unknown group references compile to no patterns, so they contribute no
    matches to either set.
    """
    allow_tokens = list(allow_tokens or ())
    deny_tokens = list(deny_tokens or ())

    deny = tuple(compile_patterns(deny_tokens))
    allow = tuple(compile_patterns(allow_tokens))

    if not allow and not deny:
        logger.debug("ToolPolicy: no allow/deny patterns, matcher is unrestricted")
        return _allow_everything

    logger.debug(
        "ToolPolicy: compiled allow=%d pattern(s) from %d token(s), deny=%d pattern(s) from %d token(s)",
        len(allow),
        len(allow_tokens),
        len(deny),
        len(deny_tokens),
    )

    def matcher(name: str) -> bool:
        if deny and matches_any(name, deny):
            return False
        if not allow:
            return True
        return matches_any(name, allow)

    return matcher


# ---------------------------------------------------------------------------
# Layered resolution
# ---------------------------------------------------------------------------

def _coerce_config(config: PolicyLike) -> ToolPolicyConfig:
    if config is None:
        return ToolPolicyConfig()
    if isinstance(config, ToolPolicyConfig):
        return config
    return ToolPolicyConfig.model_validate(dict(config))


def effective_allow_tokens(
    profile: Union[str, ToolProfile, None],
    allow: Sequence[str],
    also_allow: Sequence[str],
) -> List[str]:
    """Compute the allow tokens a policy resolves to.

    Order of precedence:
    1. Explicit ``allow`` (non-empty) — taken verbatim, profile ignored.
    2. ``full`` profile — empty (no restriction; ``also_allow`` cannot
       narrow it).
    3. Profile defaults ∪ ``also_allow``, expanded and deduplicated.
    """
    if allow:
        return list(allow)

    resolved = parse_profile(profile)
    if resolved is not None and not TOOL_PROFILES[resolved]:
        return []

    return expand_tool_groups(
        [*resolve_profile_allow_list(resolved), *expand_tool_groups(also_allow)]
    )


def resolve_effective_policy(
    config: PolicyLike = None,
    *,
    profile: Union[str, ToolProfile, None] = None,
    allow: Optional[Sequence[str]] = None,
    also_allow: Optional[Sequence[str]] = None,
    deny: Optional[Sequence[str]] = None,
) -> ToolPolicyMatcher:
    """Resolve profile + allow + also_allow + deny into one matcher.

    Pass either a :class:`ToolPolicyConfig` (or equivalent mapping) or the
    individual fields as keywords.
    """
    if config is not None:
        policy = _coerce_config(config)
        profile = policy.profile
        allow = policy.allow
        also_allow = policy.also_allow
        deny = policy.deny

    effective_allow = effective_allow_tokens(profile, allow or (), also_allow or ())
    return make_tool_policy_matcher(effective_allow, list(deny or ()))


def filter_tools_by_policy(candidates: Iterable[str], config: PolicyLike = None) -> List[str]:
    """Keep the candidates the policy permits, preserving order and duplicates."""
    matcher = resolve_effective_policy(_coerce_config(config))
    return [name for name in candidates if matcher(name)]


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class ToolPolicyEngine:
    """Session-scoped wrapper around one resolved matcher.

    Typical usage::

        engine = ToolPolicyEngine.for_config(session_policy)
        if not engine.is_tool_allowed("web_fetch"):
            ...
        advertised = engine.filter_tool_names(all_tool_names)
    """

    def __init__(self, config: ToolPolicyConfig) -> None:
        self._config = config
        self._allow_tokens = effective_allow_tokens(config.profile, config.allow, config.also_allow)
        self._deny_tokens = list(config.deny)
        self._matcher = make_tool_policy_matcher(self._allow_tokens, self._deny_tokens)

    # -- Factory -----------------------------------------------------------

    @classmethod
    def for_config(
        cls,
        config: PolicyLike = None,
        provider: Optional[str] = None,
    ) -> "ToolPolicyEngine":
        """Create an engine for a policy, optionally narrowed to a provider.

        Args:
            config: Policy model or mapping (``None`` = unrestricted).
            provider: Model provider whose ``by_provider`` entry, if any,
                overrides the base fields.
        """
        policy = _coerce_config(config)
        if provider:
            policy = policy.for_provider(provider)

        logger.debug(
            "ToolPolicyEngine: profile=%s allow=%s also_allow=%s deny=%s provider=%s",
            policy.profile,
            policy.allow,
            policy.also_allow,
            policy.deny,
            provider,
        )
        return cls(policy)

    # -- Properties --------------------------------------------------------

    @property
    def config(self) -> ToolPolicyConfig:
        return self._config

    @property
    def matcher(self) -> ToolPolicyMatcher:
        return self._matcher

    @property
    def is_unrestricted(self) -> bool:
        """True when the policy has neither allow nor deny tokens."""
        return not self._allow_tokens and not self._deny_tokens

    # -- Tool-name filtering -----------------------------------------------

    def is_tool_allowed(self, tool_name: str) -> bool:
        """Check whether an individual tool name passes the policy."""
        return self._matcher(tool_name)

    def check(self, tool_names: Iterable[str]) -> Dict[str, bool]:
        """Decision per distinct name, in first-seen order."""
        return {name: self._matcher(name) for name in tool_names}

    def filter_tool_names(self, names: Optional[Iterable[str]]) -> List[str]:
        """Filter a list of tool names through the policy.

        Args:
            names: Tool name list (may be None).

        Returns:
            Permitted names in input order.
        """
        if names is None:
            return []
        names = list(names)
        if self.is_unrestricted:
            return names

        allowed = [n for n in names if self._matcher(n)]
        removed = set(names) - set(allowed)
        if removed:
            logger.info(
                "ToolPolicy [%s]: removed %d tool(s): %s",
                self._config.profile or "-",
                len(removed),
                ", ".join(sorted(removed)),
            )
        return allowed

    # -- Repr --------------------------------------------------------------

    def __repr__(self) -> str:
        return (
            f"ToolPolicyEngine(profile={self._config.profile!r}, "
            f"allow={'*' if not self._allow_tokens else len(self._allow_tokens)}, "
            f"deny={len(self._deny_tokens)})"
        )

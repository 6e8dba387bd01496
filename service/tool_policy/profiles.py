"""
Tool profiles — named default allow-token templates.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import (
    List,
    Mapping,
    Optional,
    Tuple,
    Union,
)

from service.tool_policy.groups import expand_tool_groups


class ToolProfile(str, Enum):
    """Predefined tool-access profiles.

    Each profile is a list of policy tokens (group references or literal tool
    names) expanded at resolution time.
    """

    MINIMAL = "minimal"
    """Core tools only: memory, task suggestions, character pose."""

    CODING = "coding"
    """Core + web + workspace file tools."""

    MESSAGING = "messaging"
    """Core + web + canvas + soul, plus the ``request_tools`` meta-tool."""

    FULL = "full"
    """No restriction contributed by the profile."""


TOOL_PROFILES: Mapping[ToolProfile, Tuple[str, ...]] = MappingProxyType({
    ToolProfile.MINIMAL:   ("group:core",),
    ToolProfile.CODING:    ("group:core", "group:web", "group:workspace"),
    ToolProfile.MESSAGING: ("group:core", "group:web", "group:canvas", "group:soul", "request_tools"),
    ToolProfile.FULL:      (),  # empty => allow-all sentinel
})


def parse_profile(profile: Union[str, ToolProfile, None]) -> Optional[ToolProfile]:
    """Return the matching :class:`ToolProfile`, or None if absent/unknown."""
    if profile is None:
        return None
    if isinstance(profile, ToolProfile):
        return profile
    try:
        return ToolProfile(profile)
    except ValueError:
        return None


def resolve_profile_allow_list(profile: Union[str, ToolProfile, None]) -> List[str]:
    """Expand a profile into its literal allow list.

    Absent or unknown profiles return ``[]``: they contribute no restriction
    on their own.  ``full`` returns ``[]`` as well.
    """
    resolved = parse_profile(profile)
    if resolved is None:
        return []
    tokens = TOOL_PROFILES[resolved]
    if not tokens:
        return []
    return expand_tool_groups(tokens)

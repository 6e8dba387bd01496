"""
Tool groups — static ``group:<name>`` directory.

Groups are named, ordered bundles of tool names that policy tokens can refer
to (``"group:web"``).  ``group:all`` is derived from every other group at
import time and is never edited by hand.

The module also carries the group catalog used when advertising tools to an
agent (descriptions, loaded flags, the ``request_tools`` argument parser).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import (
    Dict,
    Iterable,
    List,
    Mapping,
    Tuple,
)

GROUP_PREFIX = "group:"


# ---------------------------------------------------------------------------
# Group definitions  (extend as new tools are added)
# ---------------------------------------------------------------------------

_BASE_TOOL_GROUPS: Dict[str, Tuple[str, ...]] = {
    "group:core": (
        "memory_search",
        "memory_get",
        "set_character_pose",
        "task_suggest",
    ),
    "group:web": (
        "web_search",
        "web_fetch",
    ),
    "group:canvas": (
        "canvas_get_state",
        "canvas_set_layer_variant",
        "canvas_set_layer_color",
        "canvas_set_palette",
        "canvas_set_pose",
        "canvas_set_animation",
        "canvas_reset_character",
        "canvas_undo",
        "canvas_export_blueprint",
        "canvas_batch_ops",
        "canvas_randomize_character",
        "canvas_describe_character",
        "canvas_adjust_color",
        "canvas_set_layer_visibility",
        "canvas_cycle_variant",
        "canvas_import_blueprint",
    ),
    "group:soul": (
        "soul_observe_trait",
        "soul_get_state",
    ),
    "group:workspace": (
        "read_file",
        "write_file",
        "list_files",
    ),
}


def _union_of(groups: Iterable[Tuple[str, ...]]) -> Tuple[str, ...]:
    seen: Dict[str, None] = {}
    for members in groups:
        for name in members:
            seen.setdefault(name, None)
    return tuple(seen)


TOOL_GROUPS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    **_BASE_TOOL_GROUPS,
    "group:all": _union_of(_BASE_TOOL_GROUPS.values()),
})

TOOL_GROUP_DESCRIPTIONS: Mapping[str, str] = MappingProxyType({
    "core": "Memory search, task suggestions, and character pose",
    "web": "Web search and URL content fetching",
    "canvas": "Pixel character builder - layers, colors, poses, animations",
    "soul": "Personality trait observation and soul state",
    "workspace": "File read/write/list for workspace context",
})


def group_names() -> List[str]:
    """Bare group names (without prefix), excluding the derived ``all``."""
    return [key[len(GROUP_PREFIX):] for key in _BASE_TOOL_GROUPS]


# ---------------------------------------------------------------------------
# Expansion
# ---------------------------------------------------------------------------

def expand_tool_groups(tokens: Iterable[str]) -> List[str]:
    """Expand ``group:*`` tokens into member tool names.

    Non-group tokens (literal names and wildcard patterns alike) pass through
    unchanged.  Unknown groups expand to nothing.  The result is
    deduplicated, keeping first-seen order.

    Example::

        expand_tool_groups(["group:web", "request_tools"])
        # -> ["web_search", "web_fetch", "request_tools"]
    """
    result: Dict[str, None] = {}
    for token in tokens:
        if token.startswith(GROUP_PREFIX):
            for name in TOOL_GROUPS.get(token, ()):
                result.setdefault(name, None)
            continue
        result.setdefault(token, None)
    return list(result)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ToolGroupInfo:
    """Catalog entry for one tool group."""

    name: str
    description: str
    tool_names: Tuple[str, ...] = field(default_factory=tuple)
    loaded: bool = False

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "description": self.description,
            "tool_names": list(self.tool_names),
            "loaded": self.loaded,
        }


def describe_tool_groups(available_names: Iterable[str] = ()) -> List[ToolGroupInfo]:
    """Build the group catalog.

    A group is reported as ``loaded`` when at least one of its members is in
    *available_names* (typically the policy-filtered tool list).
    """
    available = set(available_names)
    infos = []
    for name in group_names():
        members = TOOL_GROUPS[GROUP_PREFIX + name]
        infos.append(ToolGroupInfo(
            name=name,
            description=TOOL_GROUP_DESCRIPTIONS.get(name, ""),
            tool_names=members,
            loaded=any(member in available for member in members),
        ))
    return infos


def summarize_tool_names(names: Iterable[str]) -> str:
    """Render a short, group-bucketed summary of *names*."""
    names = list(names)
    if not names:
        return "No tools available."

    grouped: Dict[str, List[str]] = {}
    for tool_name in names:
        label = "other"
        for group in group_names():
            if tool_name in TOOL_GROUPS[GROUP_PREFIX + group]:
                label = group
                break
        grouped.setdefault(label, []).append(tool_name)

    lines = [f"{len(names)} tools available:"]
    for label, members in grouped.items():
        lines.append(f"  {label}: {', '.join(members)}")
    return "\n".join(lines)


def parse_requested_groups(text: str) -> Tuple[List[str], List[str]]:
    """Split a ``request_tools`` argument into (valid, invalid) group names.

    Accepts a comma-separated list; blanks are skipped and both outputs are
    deduplicated in first-seen order.
    """
    known = set(group_names())
    valid: Dict[str, None] = {}
    invalid: Dict[str, None] = {}
    for raw in (text or "").split(","):
        name = raw.strip()
        if not name:
            continue
        if name in known:
            valid.setdefault(name, None)
        else:
            invalid.setdefault(name, None)
    return list(valid), list(invalid)

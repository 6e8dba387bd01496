"""
Compiled tool-name patterns.

A policy token compiles to zero or more :class:`CompiledPattern` values.
The pattern kinds form a closed set (``ALL``, ``EXACT``, ``REGEX``) and every
match site handles all three.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import (
    Iterable,
    List,
    Optional,
    Sequence,
)

from service.tool_policy.groups import GROUP_PREFIX, TOOL_GROUPS

WILDCARD = "*"


class PatternKind(str, Enum):
    """Closed set of pattern shapes."""

    ALL = "all"
    EXACT = "exact"
    REGEX = "regex"


@dataclass(frozen=True)
class CompiledPattern:
    """One matchable unit.

    ``value`` is the literal tool name for ``EXACT``; ``regex`` is the
    anchored expression for ``REGEX``; ``ALL`` carries neither.
    """

    kind: PatternKind
    value: Optional[str] = None
    regex: Optional[re.Pattern[str]] = None

    def matches(self, name: str) -> bool:
        if self.kind is PatternKind.ALL:
            return True
        if self.kind is PatternKind.EXACT:
            return self.value == name
        if self.kind is PatternKind.REGEX:
            return self.regex is not None and self.regex.fullmatch(name) is not None
        raise AssertionError(f"unhandled pattern kind: {self.kind!r}")


MATCH_ALL = CompiledPattern(PatternKind.ALL)


def exact(value: str) -> CompiledPattern:
    return CompiledPattern(PatternKind.EXACT, value=value)


def glob_to_regex(token: str) -> re.Pattern[str]:
    """Translate a ``*`` glob into an anchored regex; other chars are literal."""
    body = ".*".join(re.escape(part) for part in token.split(WILDCARD))
    return re.compile(f"^{body}$", re.DOTALL)


def compile_pattern(token: str) -> List[CompiledPattern]:
    """Compile one policy token.

    - ``"*"`` and ``"group:all"`` -> match everything
    - ``"group:web"`` -> one exact pattern per member
    - ``"group:unknown"`` -> nothing
    - ``"web_*"`` -> anchored regex
    - anything else -> exact match
    """
    trimmed = token.strip()

    if trimmed == WILDCARD:
        return [MATCH_ALL]

    if trimmed.startswith(GROUP_PREFIX):
        if trimmed == "group:all":
            return [MATCH_ALL]
        return [exact(name) for name in TOOL_GROUPS.get(trimmed, ())]

    if WILDCARD in trimmed:
        return [CompiledPattern(PatternKind.REGEX, value=trimmed, regex=glob_to_regex(trimmed))]

    return [exact(trimmed)]


def compile_patterns(tokens: Iterable[str]) -> List[CompiledPattern]:
    """Compile every token, concatenating results in encounter order."""
    compiled: List[CompiledPattern] = []
    for token in tokens:
        compiled.extend(compile_pattern(token))
    return compiled


def matches_any(name: str, patterns: Sequence[CompiledPattern]) -> bool:
    """True if *name* matches at least one of *patterns*."""
    return any(pattern.matches(name) for pattern in patterns)

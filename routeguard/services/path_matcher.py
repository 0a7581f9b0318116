"""Request path -> rule lookup.

Each normalized path compiles to an anchored pattern where ``*`` stands for
exactly one path segment. Lookup scans patterns in declaration order and
returns the first hit that has a rule for the requested method. There is no
"most specific wins" pass: an earlier ``/a/*`` shadows a later ``/a/b``.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .rule_index import Rule, RuleIndex

WILDCARD = "*"
_SEGMENT = "[^/]+"


def trim_path(path: str) -> str:
    """Drop trailing slashes; the bare root stays ``/``."""
    return path.rstrip("/") or "/"


def compile_pattern(normalized_path: str) -> re.Pattern:
    parts = trim_path(normalized_path).split(WILDCARD)
    return re.compile(_SEGMENT.join(re.escape(part) for part in parts))


def match(concrete_path: str, method: str, index: RuleIndex) -> Optional[Rule]:
    """Rule governing ``method`` on ``concrete_path``, or None for no match."""
    path = trim_path(concrete_path)
    method = method.upper()
    for normalized, pattern in index.patterns():
        if pattern.fullmatch(path) is None:
            continue
        rule = index.get(normalized, method)
        if rule is not None:
            return rule
    return None

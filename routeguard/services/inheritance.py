"""Parent-path rule inheritance.

A route without a rule of its own takes the rule of its nearest ancestor.
Only ancestors with non-empty ``level_rights`` count; an ancestor that only
names ``special_rights`` is walked past. The ancestor's rule is taken as a
whole, never merged field by field with the child.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .rule_index import Rule, RuleIndex


def _candidates(parent: str):
    # The parent itself, then a wildcard route covering the parent's children.
    yield parent
    yield parent + "/*"


def resolve_inherited_rule(normalized_path: str, method: str, index: RuleIndex) -> Optional[Rule]:
    """Find the rule ``normalized_path`` inherits for ``method``.

    Walks up one ``/`` segment at a time. Returns None once the walk runs
    out of segments without finding an ancestor with level rights.
    """
    path = normalized_path.rstrip("/")
    while True:
        parent = path[:path.rfind("/")] if "/" in path else ""
        if not parent:
            return None
        for candidate in _candidates(parent):
            if candidate == normalized_path:
                continue
            rule = index.get(candidate, method)
            if rule is not None and rule.level_rights:
                return rule
        path = parent

"""Allow/deny decision for a principal against a resolved rule.

Two independent ways to pass, OR'd together:

    - level rights: the principal is the superuser, the rule lists the
      principal's level, or the rule lists no levels and names no tool
    - special rights: the rule names a tool and the principal's grant for
      that tool has the requested action set

There is no explicit deny; failing both is the only way to be refused.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Mapping, Optional

from ..exceptions import ValidationError

if TYPE_CHECKING:
    from .rule_index import Rule

logger = logging.getLogger(__name__)

ACTIONS = ("access", "read", "write", "delete")
DEFAULT_ACTION = "access"
SUPERUSER_LEVEL = 100

_EXTERNAL_SCHEMES = ("http://", "https://")


@dataclass(frozen=True)
class GrantRow:
    """Special-rights flags for one tool."""

    access: bool = False
    read: bool = False
    write: bool = False
    delete: bool = False

    @classmethod
    def full(cls) -> GrantRow:
        return cls(access=True, read=True, write=True, delete=True)

    def allows(self, action: str) -> bool:
        return bool(getattr(self, action, False))

    def to_dict(self) -> Dict[str, bool]:
        return {action: getattr(self, action) for action in ACTIONS}


@dataclass(frozen=True)
class Principal:
    """Authenticated caller as seen by a single authorization check."""

    user_id: str
    access_level: int
    special_grants: Mapping[str, Mapping[str, bool]] = field(default_factory=dict)

    @classmethod
    def from_grant_rows(
        cls, user_id: str, access_level: int, grants: Mapping[str, GrantRow]
    ) -> Principal:
        return cls(
            user_id=user_id,
            access_level=access_level,
            special_grants={tool: row.to_dict() for tool, row in grants.items()},
        )


def validate_action(action: str) -> str:
    if action not in ACTIONS:
        raise ValidationError(
            f"Unknown action '{action}'. Must be one of: {', '.join(ACTIONS)}",
            field="action",
        )
    return action


def is_external_url(concrete_path: str) -> bool:
    """True for paths like ``/https://example.com`` produced by proxied links."""
    return concrete_path.lstrip("/").startswith(_EXTERNAL_SCHEMES)


def level_rights_satisfied(rule: Rule, access_level: int, superuser_level: int = SUPERUSER_LEVEL) -> bool:
    if access_level == superuser_level:
        return True
    if not rule.level_rights:
        # A rule naming only a tool is gated by that tool's grant alone.
        return rule.special_rights is None
    return access_level in rule.level_rights


def special_rights_satisfied(rule: Rule, principal: Principal, action: str) -> bool:
    if rule.special_rights is None:
        return False
    grant = principal.special_grants.get(rule.special_rights)
    if grant is None:
        return False
    return bool(grant.get(action, False))


def authorize(
    principal: Optional[Principal],
    rule: Optional[Rule],
    action: str = DEFAULT_ACTION,
    method: str = "GET",
    concrete_path: str = "",
    superuser_level: int = SUPERUSER_LEVEL,
) -> bool:
    """Decide whether ``principal`` may perform ``action``.

    Args:
        principal: The authenticated caller, or None when there is no session.
        rule: Rule found by the path matcher, or None when nothing matched.
        action: One of ``access``, ``read``, ``write``, ``delete``.
        method: HTTP method of the request (the rule is already method-specific).
        concrete_path: The requested path; only consulted when ``rule`` is None.
        superuser_level: Access level that passes every level-rights check.

    Raises:
        ValidationError: If ``action`` is not a known action.
    """
    validate_action(action)

    if principal is None:
        return False

    if rule is None:
        allowed = is_external_url(concrete_path)
        if not allowed:
            logger.debug("No rule for %s %s, denying", method, concrete_path)
        return allowed

    return (
        level_rights_satisfied(rule, principal.access_level, superuser_level)
        or special_rights_satisfied(rule, principal, action)
    )

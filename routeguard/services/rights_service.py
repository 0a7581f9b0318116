"""Rights service, the process-wide entry point for access checks.

Built once from the route table at start-up; every request then asks it
``check_access(path, method, action, principal)``. The service never looks
at ambient request state: the caller passes everything in.
"""

import logging
from typing import Iterable, Optional

from ..schemas.rights import RouteDeclaration
from .authorization import DEFAULT_ACTION, SUPERUSER_LEVEL, Principal, authorize
from .path_matcher import match
from .rule_index import Rule, RuleIndex, build_index

logger = logging.getLogger(__name__)


class RightsService:
    """Holds the frozen rule index and answers access questions against it."""

    def __init__(self, index: RuleIndex, superuser_level: int = SUPERUSER_LEVEL):
        self._index = index
        self.superuser_level = superuser_level

    @classmethod
    def from_routes(
        cls, routes: Iterable[RouteDeclaration], superuser_level: int = SUPERUSER_LEVEL
    ) -> "RightsService":
        return cls(build_index(routes), superuser_level=superuser_level)

    def get_access_list(self) -> RuleIndex:
        """The rule index, for the security matrix and diagnostics."""
        return self._index

    def find_rule(self, concrete_path: str, method: str = "GET") -> Optional[Rule]:
        return match(concrete_path, method, self._index)

    def check_access(
        self,
        concrete_path: str,
        method: str = "GET",
        action: str = DEFAULT_ACTION,
        principal: Optional[Principal] = None,
    ) -> bool:
        """Whether ``principal`` may perform ``action`` on ``method concrete_path``.

        A missing principal is a plain deny, not an error.
        """
        rule = self.find_rule(concrete_path, method)
        allowed = authorize(
            principal,
            rule,
            action=action,
            method=method,
            concrete_path=concrete_path,
            superuser_level=self.superuser_level,
        )
        logger.debug(
            "Access %s for %s %s",
            "granted" if allowed else "denied",
            method.upper(),
            concrete_path,
            extra={
                "user_id": principal.user_id if principal else None,
                "action": action,
                "matched": rule is not None,
            },
        )
        return allowed

"""Rule index: route declarations turned into per-(path, method) rules.

The index is built in two passes:

1. Direct pass: every declaration writes its own rule under its normalized
   path and method. A later declaration that normalizes to the same
   ``(path, method)`` overwrites the earlier one.
2. Inheritance pass: every declaration whose rule is still empty takes the
   rule of its nearest ancestor with non-empty level rights
   (see ``inheritance.resolve_inherited_rule``).

Once built the index is frozen. Path order is declaration order, which is
also the order ``path_matcher.match`` scans in.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from .inheritance import resolve_inherited_rule
from .path_matcher import WILDCARD, compile_pattern

if TYPE_CHECKING:
    from ..schemas.rights import RouteDeclaration

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\{[^/{}]*\}")


def normalize_path(template: str) -> str:
    """Replace every ``{name}`` placeholder with the wildcard token.

    ``/users/{id}/edit`` and ``/users/{user_id}/edit`` both become
    ``/users/*/edit``.
    """
    return _PLACEHOLDER.sub(WILDCARD, template)


@dataclass(frozen=True)
class Rule:
    """Authorization rule for one normalized path and method."""

    level_rights: frozenset = frozenset()
    special_rights: Optional[str] = None
    special_rights_default: Optional[frozenset] = None

    @classmethod
    def from_declaration(cls, route: RouteDeclaration) -> Rule:
        default = route.special_rights_default
        return cls(
            level_rights=frozenset(route.level_rights or ()),
            special_rights=route.special_rights or None,
            special_rights_default=frozenset(default) if default is not None else None,
        )

    @property
    def is_empty(self) -> bool:
        return (
            not self.level_rights
            and self.special_rights is None
            and self.special_rights_default is None
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level_rights": sorted(self.level_rights),
            "special_rights": self.special_rights,
            "special_rights_default": (
                sorted(self.special_rights_default)
                if self.special_rights_default is not None else None
            ),
        }


class RuleIndex:
    """Ordered mapping ``normalized_path -> method -> Rule``.

    Only ``build_index`` writes to an index; afterwards it is read-only and
    safe to share between concurrent requests.
    """

    def __init__(self) -> None:
        self._rules: Dict[str, Dict[str, Rule]] = {}
        self._patterns: List[Tuple[str, re.Pattern]] = []
        self._frozen = False

    def get(self, path: str, method: str) -> Optional[Rule]:
        """Rule registered for exactly this normalized path and method."""
        methods = self._rules.get(path)
        if methods is None:
            return None
        return methods.get(method.upper())

    def methods(self, path: str) -> Mapping[str, Rule]:
        return MappingProxyType(self._rules.get(path, {}))

    def items(self) -> Iterator[Tuple[str, Mapping[str, Rule]]]:
        for path, methods in self._rules.items():
            yield path, MappingProxyType(methods)

    def patterns(self) -> List[Tuple[str, re.Pattern]]:
        """Compiled wildcard patterns in declaration order."""
        return list(self._patterns)

    def to_dict(self) -> Dict[str, Dict[str, Dict[str, Any]]]:
        return {
            path: {method: rule.to_dict() for method, rule in methods.items()}
            for path, methods in self._rules.items()
        }

    def __contains__(self, path: object) -> bool:
        return path in self._rules

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def _set(self, path: str, method: str, rule: Rule) -> None:
        if self._frozen:
            raise RuntimeError("RuleIndex is read-only once built")
        self._rules.setdefault(path, {})[method] = rule

    def _freeze(self) -> None:
        self._patterns = [(path, compile_pattern(path)) for path in self._rules]
        self._frozen = True


def build_index(routes: Iterable[RouteDeclaration]) -> RuleIndex:
    """Build the frozen rule index for an ordered route table."""
    routes = list(routes)
    index = RuleIndex()

    # Direct pass
    declared_by: Dict[Tuple[str, str], str] = {}
    for route in routes:
        path = normalize_path(route.path)
        key = (path, route.method)
        if key in declared_by:
            logger.warning(
                "Route %s %s overrides %s: both normalize to %s",
                route.method, route.path, declared_by[key], path,
                extra={"normalized_path": path, "method": route.method},
            )
        declared_by[key] = route.path
        index._set(path, route.method, Rule.from_declaration(route))

    # Inheritance pass, against the complete direct index
    inherited = 0
    for route in routes:
        path = normalize_path(route.path)
        own = index.get(path, route.method)
        if own is not None and not own.is_empty:
            continue
        parent_rule = resolve_inherited_rule(path, route.method, index)
        if parent_rule is not None:
            index._set(path, route.method, parent_rule)
            inherited += 1

    index._freeze()
    logger.info(
        "Rule index built",
        extra={"routes": len(routes), "paths": len(index), "inherited": inherited},
    )
    return index

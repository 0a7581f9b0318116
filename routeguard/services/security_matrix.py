"""Security matrix and default grants derived from a menu definition.

A menu file maps each top-level menu key to its children, each child
pointing at a page ``url``. The security matrix pairs every child with the
``GET`` rule of its page, since a menu item is only useful when its page can
be read. The default grants give a newly provisioned user full special
rights on every tool whose rule lists the user's level in
``special_rights_default``.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Union

import pydantic

from ..exceptions import ConfigurationError
from ..schemas.rights import MenuDefinition
from .authorization import GrantRow
from .rule_index import Rule, RuleIndex, normalize_path

logger = logging.getLogger(__name__)

SecurityMatrix = Dict[str, Dict[str, Rule]]

_MENU_METHOD = "GET"


def resolve_menu_path(menu_name: str, menu_dir: Union[str, Path]) -> Path:
    """Locate ``menu_name`` inside ``menu_dir``.

    Raises:
        ConfigurationError: If the name points outside the directory or the
            file does not exist.
    """
    base = Path(menu_dir).resolve()
    candidate = (base / menu_name).resolve()
    if base not in candidate.parents:
        raise ConfigurationError(f"Menu name escapes the menu directory: {menu_name}", source=menu_name)
    if not candidate.is_file():
        raise ConfigurationError(f"Menu definition not found: {menu_name}", source=menu_name)
    return candidate


def load_menu_definition(path: Union[str, Path]) -> MenuDefinition:
    """Read and validate a JSON menu definition.

    Raises:
        ConfigurationError: If the file cannot be read, is not JSON, or does
            not have the menu shape.
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(f"Cannot read menu definition: {e}", source=str(path)) from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Menu definition is not valid JSON: {e}", source=str(path)) from e
    return _validate_menu(raw, source=str(path))


def _validate_menu(raw: Any, source: str) -> MenuDefinition:
    try:
        return MenuDefinition.model_validate(raw)
    except pydantic.ValidationError as e:
        raise ConfigurationError(f"Malformed menu definition: {e}", source=source) from e


def build_security_matrix(
    menu: Union[MenuDefinition, Mapping[str, Any]], index: RuleIndex
) -> SecurityMatrix:
    """Map ``menu_key -> child_key -> Rule`` for children with a GET rule.

    Children whose url has no GET rule are left out, and so are menu keys
    left without children.
    """
    if not isinstance(menu, MenuDefinition):
        menu = _validate_menu(menu, source="<mapping>")

    matrix: SecurityMatrix = {}
    skipped = 0
    for menu_key, section in menu.items():
        for child_key, child in section.children.items():
            rule = index.get(normalize_path(child.url), _MENU_METHOD)
            if rule is None:
                skipped += 1
                continue
            matrix.setdefault(menu_key, {})[child_key] = rule

    if skipped:
        logger.debug("Security matrix skipped %d menu entries without a GET rule", skipped)
    return matrix


def build_default_grants(matrix: SecurityMatrix, access_level: int) -> Dict[str, GrantRow]:
    """Full-access grants for every tool defaulted to ``access_level``."""
    grants: Dict[str, GrantRow] = {}
    for children in matrix.values():
        for rule in children.values():
            if rule.special_rights is None or rule.special_rights_default is None:
                continue
            if access_level in rule.special_rights_default:
                grants[rule.special_rights] = GrantRow.full()
    return grants

"""Seed a user's special rights from a menu definition.

Used when a user is created or their access level changes: every tool the
menu exposes with a ``special_rights_default`` covering the level is granted
in full, and all previous grants of the user are dropped.
"""

import logging
from pathlib import Path
from typing import Dict, Union

from sqlalchemy.orm import Session

from ..repositories.system_rights_repository import SystemRightsRepository
from .authorization import GrantRow
from .rule_index import RuleIndex
from .security_matrix import build_default_grants, build_security_matrix, load_menu_definition

logger = logging.getLogger(__name__)


def update_rights_user(
    db: Session,
    index: RuleIndex,
    menu_path: Union[str, Path],
    user_id: str,
    access_level: int,
) -> Dict[str, GrantRow]:
    """Replace ``user_id``'s grants with the defaults for ``access_level``.

    Args:
        db: An open SQLAlchemy session.
        index: The rule index the menu urls are looked up in.
        menu_path: JSON menu definition file.
        user_id: User whose grants are replaced.
        access_level: Level the defaults are computed for.

    Returns:
        The grants now stored for the user, keyed by tool.

    Raises:
        ConfigurationError: If the menu definition cannot be loaded.
    """
    menu = load_menu_definition(menu_path)
    matrix = build_security_matrix(menu, index)
    grants = build_default_grants(matrix, access_level)

    SystemRightsRepository(db).replace_user_grants(user_id, grants)
    logger.info(
        "Provisioned default rights for %s", user_id,
        extra={"access_level": access_level, "tools": sorted(grants)},
    )
    return grants

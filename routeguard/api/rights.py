"""Rights API: rule introspection, access checks, security matrices and grants.

Every endpoint declares its own rule through ``rights_extra``; those rules
are part of the index built at start-up, so the router is guarded by the
same engine it exposes.
"""

import logging
from typing import Dict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.auth import get_rights_service, require_route_access, route_guard
from ..core.config import settings
from ..core.route_table import rights_extra
from ..database import get_db
from ..repositories.system_rights_repository import SystemRightsRepository
from ..repositories.user_repository import UserRepository
from ..schemas.rights import (
    AccessCheckRequest,
    AccessCheckResponse,
    GrantRowSchema,
    ProvisionRequest,
    RuleResponse,
)
from ..services.authorization import GrantRow, Principal
from ..services.provisioning_service import update_rights_user
from ..services.rights_service import RightsService
from ..services.rule_index import Rule
from ..services.security_matrix import build_security_matrix, load_menu_definition, resolve_menu_path

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/rights", tags=["rights"])

RIGHTS_TOOL = "rights_admin"


def _rule_response(rule: Rule) -> RuleResponse:
    return RuleResponse(**rule.to_dict())


def _grants_response(grants: Dict[str, GrantRow]) -> Dict[str, GrantRowSchema]:
    return {tool: GrantRowSchema(**row.to_dict()) for tool, row in grants.items()}


# -- Rule index --------------------------------------------------------------

@router.get(
    "/access-list",
    openapi_extra=rights_extra(level_rights=[90], special_rights=RIGHTS_TOOL),
)
def get_access_list(
    rights: RightsService = Depends(get_rights_service),
    principal: Principal = Depends(route_guard("read")),
):
    """Full rule index: normalized path -> method -> rule, in match order."""
    return rights.get_access_list().to_dict()


@router.post(
    "/check",
    response_model=AccessCheckResponse,
    openapi_extra=rights_extra(),
)
def check_access(
    data: AccessCheckRequest,
    rights: RightsService = Depends(get_rights_service),
    principal: Principal = Depends(require_route_access),
):
    """Would the calling principal be allowed ``action`` on ``method path``?"""
    rule = rights.find_rule(data.path, data.method)
    allowed = rights.check_access(data.path, data.method, data.action, principal)
    return AccessCheckResponse(
        allowed=allowed,
        rule=_rule_response(rule) if rule is not None else None,
    )


# -- Security matrix ---------------------------------------------------------

@router.get(
    "/menus/{menu_name}/security-matrix",
    openapi_extra=rights_extra(level_rights=[90], special_rights=RIGHTS_TOOL),
)
def get_security_matrix(
    menu_name: str,
    rights: RightsService = Depends(get_rights_service),
    principal: Principal = Depends(route_guard("read")),
) -> Dict[str, Dict[str, RuleResponse]]:
    menu = load_menu_definition(resolve_menu_path(menu_name, settings.menu_dir))
    matrix = build_security_matrix(menu, rights.get_access_list())
    return {
        menu_key: {child_key: _rule_response(rule) for child_key, rule in children.items()}
        for menu_key, children in matrix.items()
    }


# -- Per-user grants ---------------------------------------------------------

@router.get(
    "/users/{user_id}/grants",
    response_model=Dict[str, GrantRowSchema],
    openapi_extra=rights_extra(level_rights=[90], special_rights=RIGHTS_TOOL),
)
def get_user_grants(
    user_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(route_guard("read")),
):
    UserRepository(db).get_by_id(user_id)
    return _grants_response(SystemRightsRepository(db).load_user_grants(user_id))


@router.put(
    "/users/{user_id}/grants",
    response_model=Dict[str, GrantRowSchema],
    openapi_extra=rights_extra(level_rights=[100], special_rights=RIGHTS_TOOL),
)
def replace_user_grants(
    user_id: str,
    grants: Dict[str, GrantRowSchema],
    db: Session = Depends(get_db),
    principal: Principal = Depends(route_guard("write")),
):
    """Replace all of a user's special rights with the given set."""
    UserRepository(db).get_by_id(user_id)
    repo = SystemRightsRepository(db)
    repo.replace_user_grants(
        user_id, {tool: GrantRow(**row.model_dump()) for tool, row in grants.items()}
    )
    logger.info("Grants replaced", extra={"user_id": user_id, "by": principal.user_id})
    return _grants_response(repo.load_user_grants(user_id))


@router.post(
    "/users/{user_id}/provision",
    response_model=Dict[str, GrantRowSchema],
    openapi_extra=rights_extra(level_rights=[100], special_rights=RIGHTS_TOOL),
)
def provision_user(
    user_id: str,
    data: ProvisionRequest,
    db: Session = Depends(get_db),
    rights: RightsService = Depends(get_rights_service),
    principal: Principal = Depends(route_guard("write")),
):
    """Reset a user's special rights to the menu defaults for their level."""
    user = UserRepository(db).get_by_id(user_id)
    access_level = data.access_level if data.access_level is not None else user.access_level
    grants = update_rights_user(
        db,
        rights.get_access_list(),
        resolve_menu_path(data.menu, settings.menu_dir),
        user_id,
        access_level,
    )
    return _grants_response(grants)

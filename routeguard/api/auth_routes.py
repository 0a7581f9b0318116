"""Identity endpoint.

    GET /api/auth/me — the calling principal with its special rights
"""

from fastapi import APIRouter, Depends

from ..core.auth import require_route_access
from ..core.route_table import rights_extra
from ..schemas.rights import GrantRowSchema, PrincipalResponse
from ..services.authorization import Principal

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.get("/me", response_model=PrincipalResponse, openapi_extra=rights_extra())
def get_me(principal: Principal = Depends(require_route_access)):
    return PrincipalResponse(
        user_id=principal.user_id,
        access_level=principal.access_level,
        special_grants={
            tool: GrantRowSchema(**flags) for tool, flags in principal.special_grants.items()
        },
    )

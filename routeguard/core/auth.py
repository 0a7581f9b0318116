"""Authentication module — FastAPI dependencies resolving the caller.

Public interface:
    ``get_principal``      — the authenticated Principal, or None. Never raises.
    ``route_guard(action)`` — dependency factory checking the current request
                             path and method against the rule index; raises
                             401 without a principal and 403 when denied.
    ``require_route_access`` — ``route_guard()`` for the default action.

When ``settings.auth_enabled`` is False every request runs as an anonymous
superuser so the development workflow is unbroken.
"""

import logging
from typing import Callable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .config import settings
from .token_factory import decode_token
from ..database import get_db
from ..exceptions import AuthenticationError, ForbiddenError
from ..repositories.system_rights_repository import SystemRightsRepository
from ..repositories.user_repository import UserRepository
from ..services.authorization import DEFAULT_ACTION, Principal, validate_action
from ..services.rights_service import RightsService

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


def _anonymous_superuser() -> Principal:
    return Principal(user_id="anonymous", access_level=settings.superuser_level)


def load_principal(db: Session, user_id: str) -> Optional[Principal]:
    """Principal for an active user, or None when unknown or deactivated."""
    user = UserRepository(db).get_by_id_optional(user_id)
    if user is None or not user.is_active:
        logger.info("Token subject is not an active user", extra={"user_id": user_id})
        return None
    grants = SystemRightsRepository(db).load_user_grants(user.user_id)
    return Principal.from_grant_rows(user.user_id, user.access_level, grants)


def get_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[Principal]:
    """Resolve the caller from the bearer token. None means unauthenticated."""
    if not settings.auth_enabled:
        return _anonymous_superuser()

    if credentials is None:
        return None

    payload = decode_token(
        credentials.credentials, settings.jwt_secret_key, settings.jwt_algorithm
    )
    if payload is None:
        return None

    return load_principal(db, payload.sub)


def get_rights_service(request: Request) -> RightsService:
    """The RightsService built at start-up."""
    return request.app.state.rights


def route_guard(action: str = DEFAULT_ACTION) -> Callable[..., Principal]:
    """Build a dependency enforcing the rule index on the current request."""
    validate_action(action)

    def _guard(
        request: Request,
        principal: Optional[Principal] = Depends(get_principal),
        rights: RightsService = Depends(get_rights_service),
    ) -> Principal:
        if principal is None:
            raise AuthenticationError("Missing authentication token")

        path = request.url.path
        method = request.method
        if not rights.check_access(path, method, action, principal):
            logger.warning(
                "Access denied",
                extra={"user_id": principal.user_id, "path": path, "method": method, "action": action},
            )
            raise ForbiddenError(path=path, method=method)
        return principal

    return _guard


require_route_access = route_guard()

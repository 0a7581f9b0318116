"""Route table assembly.

Routes come from two places, in this order:

    1. the FastAPI application's own routes that carry an ``x-rights``
       entry in ``openapi_extra`` (see ``rights_extra``)
    2. the JSON file named by ``ROUTES_FILE``, a list of route declarations

Order matters: the path matcher stops at the first matching route.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import pydantic
from fastapi.routing import APIRoute

from ..exceptions import ConfigurationError
from ..schemas.rights import RouteDeclaration, RouteTable

logger = logging.getLogger(__name__)

RIGHTS_EXTRA_KEY = "x-rights"


def rights_extra(
    level_rights: Iterable[int] = (),
    special_rights: Optional[str] = None,
    special_rights_default: Optional[Iterable[int]] = None,
) -> Dict[str, Any]:
    """``openapi_extra`` value declaring the rule of an endpoint."""
    declared: Dict[str, Any] = {"level_rights": list(level_rights)}
    if special_rights is not None:
        declared["special_rights"] = special_rights
    if special_rights_default is not None:
        declared["special_rights_default"] = list(special_rights_default)
    return {RIGHTS_EXTRA_KEY: declared}


def collect_app_routes(routes: Iterable[Any]) -> List[RouteDeclaration]:
    """Route declarations for every API route tagged with ``rights_extra``."""
    declarations: List[RouteDeclaration] = []
    for route in routes:
        if not isinstance(route, APIRoute):
            continue
        declared = (route.openapi_extra or {}).get(RIGHTS_EXTRA_KEY)
        if declared is None:
            continue
        for method in sorted(route.methods):
            declarations.append(RouteDeclaration(path=route.path, method=method, **declared))
    return declarations


def load_route_table(path: Union[str, Path]) -> RouteTable:
    """Read a JSON list of route declarations.

    Raises:
        ConfigurationError: If the file is unreadable or malformed.
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        return RouteTable.model_validate(raw)
    except OSError as e:
        raise ConfigurationError(f"Cannot read route table: {e}", source=str(path)) from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Route table is not valid JSON: {e}", source=str(path)) from e
    except pydantic.ValidationError as e:
        raise ConfigurationError(f"Malformed route table: {e}", source=str(path)) from e


def assemble_route_table(app_routes: Iterable[Any], routes_file: Optional[str]) -> List[RouteDeclaration]:
    """Application routes first, then those of ``routes_file`` when set."""
    routes = collect_app_routes(app_routes)
    app_count = len(routes)
    if routes_file:
        routes.extend(load_route_table(routes_file))
    logger.info(
        "Route table assembled",
        extra={"app_routes": app_count, "file_routes": len(routes) - app_count, "routes_file": routes_file},
    )
    return routes

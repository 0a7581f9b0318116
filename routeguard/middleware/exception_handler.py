"""Exception handler turning RightsException into structured JSON."""

import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from ..exceptions import RightsException

logger = logging.getLogger(__name__)


async def rights_exception_handler(request: Request, exc: RightsException) -> JSONResponse:
    """Log the error with its request context and answer with ``exc.to_dict()``."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"RightsException: {exc.error_code.value}",
        extra={
            "error_code": exc.error_code.value,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details,
            "status_code": exc.status_code
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )

"""Exception handler middleware for structured error responses."""

import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from ..exceptions import SiteCraftException

logger = logging.getLogger(__name__)


async def sitecraft_exception_handler(request: Request, exc: SiteCraftException) -> JSONResponse:
    """Render a SiteCraftException as ``{"error", "message", "details"}``.

    Client errors are logged at INFO, server-side failures at ERROR.
    """
    level = logging.ERROR if exc.status_code >= 500 else logging.INFO
    logger.log(
        level,
        f"{exc.error_code.value} on {request.method} {request.url.path}",
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

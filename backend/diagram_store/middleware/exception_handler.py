"""Exception handlers producing the structured error body.

Every error response has the shape ``{"error", "message", "details"}``,
whether it comes from the store, request validation or routing.
"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..exceptions import ErrorCode, StoreException

logger = logging.getLogger(__name__)

_HTTP_ERROR_CODES = {
    404: ErrorCode.NOT_FOUND,
    405: ErrorCode.METHOD_NOT_ALLOWED,
}


async def store_exception_handler(request: Request, exc: StoreException) -> JSONResponse:
    """
    Handle store exceptions and return structured JSON responses.

    Args:
        request: FastAPI request object
        exc: StoreException instance

    Returns:
        JSONResponse with error details
    """
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"StoreException: {exc.error_code.value}",
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


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies and path parameters are client errors (400), not 422."""
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={
            "error": ErrorCode.VALIDATION_ERROR.value,
            "message": "Invalid request",
            "details": {"errors": errors},
        },
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render routing errors (unknown path, unsupported verb) in the common shape."""
    error_code = _HTTP_ERROR_CODES.get(exc.status_code, ErrorCode.INTERNAL_ERROR)
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": error_code.value,
            "message": str(exc.detail),
            "details": {"path": request.url.path, "method": request.method},
        },
        headers=getattr(exc, "headers", None),
    )

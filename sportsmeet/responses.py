"""
SportsMeet API Response Utilities
Uniform response envelope and boundary error handling.

Every response body has the shape {success, message?, data?}. Business
failures are reported with HTTP 200 and success=false; only transport-level
problems (401, 422, 429, 500) use error status codes.
"""
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Any, Dict, List, Optional

from .errors import ServiceError, ValidationError
from .logging_config import api_logger


# ============================================================
# SUCCESS RESPONSES
# ============================================================

def success(data: Any = None, message: Optional[str] = None) -> Dict:
    """Create success response"""
    response: Dict[str, Any] = {"success": True}

    if message:
        response["message"] = message

    if data is not None:
        response["data"] = data

    return response


def failure(message: str, code: Optional[str] = None, details: Any = None) -> Dict:
    """Create failure response body"""
    response: Dict[str, Any] = {"success": False, "message": message}
    if code:
        response["code"] = code
    if details is not None:
        response["details"] = details
    return response


def paginated(items: List, total: int, page: int = 1, limit: int = 10, **extra) -> Dict:
    """Paginated list payload, meant to be wrapped by success()"""
    payload = {
        "items": items,
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": (total + limit - 1) // limit,
        "has_next": page * limit < total,
        "has_prev": page > 1,
    }
    payload.update(extra)
    return payload


# ============================================================
# EXCEPTION HANDLERS
# ============================================================

async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Business failures: HTTP 200 with success=false, except late validation (422)."""
    status_code = 422 if isinstance(exc, ValidationError) else 200
    api_logger.info(
        f"Business failure: {exc.message}",
        error_code=exc.code.value,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status_code,
        content=failure(exc.message, exc.code.value),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Schema validation failures"""
    api_logger.info("Request validation failed", path=request.url.path)
    return JSONResponse(
        status_code=422,
        content=failure("Validation failed", "VALIDATION_ERROR", jsonable_encoder(exc.errors())),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Transport-level errors raised by FastAPI or dependencies"""
    api_logger.warning(
        f"HTTP Error: {exc.detail}",
        status_code=exc.status_code,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=failure(str(exc.detail), f"HTTP_{exc.status_code}"),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: never crash the process, never leak internals"""
    api_logger.error(
        f"Unexpected error: {exc}",
        error=exc,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=500,
        content=failure("An unexpected error occurred", "INTERNAL_ERROR"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

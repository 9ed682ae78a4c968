from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.schemas.response import ErrorResponse, ErrorDetail
from datetime import datetime
import logging
import uuid

logger = logging.getLogger(__name__)

def _get_error_code(status_code: int) -> str:
    code_map = {
        400: "BAD_REQUEST",
        401: "UNAUTHORIZED",
        403: "FORBIDDEN",
        404: "NOT_FOUND",
        405: "METHOD_NOT_ALLOWED",
        409: "CONFLICT",
        422: "VALIDATION_ERROR",
        429: "RATE_LIMITED",
        500: "INTERNAL_SERVER_ERROR",
        501: "NOT_IMPLEMENTED",
    }
    return code_map.get(status_code, f"HTTP_{status_code}")

def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or str(uuid.uuid4())

def _render(request: Request, status_code: int, code: str, message: str, details=None) -> JSONResponse:
    request_id = _request_id(request)
    error_response = ErrorResponse(
        error=ErrorDetail(code=code, message=message, details=details),
        timestamp=datetime.utcnow().isoformat(),
        path=request.url.path,
        request_id=request_id
    )
    return JSONResponse(status_code=status_code, content=jsonable_encoder(error_response.model_dump()))

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"[{_request_id(request)}] Validation error on {request.url.path}: {exc.errors()}")
    return _render(
        request,
        400,
        "VALIDATION_ERROR",
        "Request validation failed",
        {"validation_errors": jsonable_encoder(exc.errors())},
    )

async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    error_code = getattr(exc, "error_code", None) or _get_error_code(exc.status_code)
    details = getattr(exc, "details", None)
    logger.warning(f"[{_request_id(request)}] HTTP {exc.status_code} {error_code}: {exc.detail}")
    response = _render(
        request,
        exc.status_code,
        error_code,
        exc.detail if isinstance(exc.detail, str) else str(exc.detail),
        details,
    )
    if getattr(exc, "headers", None):
        response.headers.update(exc.headers)
    return response

async def global_exception_handler(request: Request, exc: Exception):
    if isinstance(exc, HTTPException):
        return await http_exception_handler(request, exc)

    logger.error(f"[{_request_id(request)}] Unhandled exception: {exc}", exc_info=True)
    return _render(
        request,
        500,
        "INTERNAL_SERVER_ERROR",
        "An unexpected error occurred",
        {"error_type": type(exc).__name__},
    )

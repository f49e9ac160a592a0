"""
API Error Envelope

Every error response has the shape ``{"error": str, "errorType": str}``.
Domain exceptions raised by routers and services are mapped here.
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from panelcraft.core.constants import ErrorType
from panelcraft.core.exceptions import (
    GatewayError,
    InvalidRequestError,
    OwnershipError,
    PageNotFoundError,
    PanelcraftError,
    PersistenceError,
    StoryNotFoundError,
)
from panelcraft.core.logging_config import get_logger

logger = get_logger("api.errors")

RATE_LIMIT_MESSAGE = (
    "Free tier limit reached. You can generate 1 comic per week. "
    "Try again later, or provide your own API key."
)


def error_response(message: str, error_type: Optional[str], status_code: int, **extra) -> JSONResponse:
    content = {"error": message}
    if error_type:
        content["errorType"] = error_type.value if isinstance(error_type, ErrorType) else error_type
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


def classify_exception(exc: PanelcraftError):
    """(error type, status) for a domain exception."""
    if isinstance(exc, InvalidRequestError):
        return ErrorType.VALIDATION, 400
    if isinstance(exc, (StoryNotFoundError, PageNotFoundError)):
        return ErrorType.NOT_FOUND, 404
    if isinstance(exc, OwnershipError):
        return ErrorType.FORBIDDEN, 403
    if isinstance(exc, PersistenceError):
        return ErrorType.PERSISTENCE, 500
    if isinstance(exc, GatewayError):
        status = exc.status_code if exc.status_code and exc.status_code >= 400 else 500
        return ErrorType.API_ERROR, status
    return ErrorType.API_ERROR, 500


async def panelcraft_error_handler(request: Request, exc: PanelcraftError) -> JSONResponse:
    error_type, status = classify_exception(exc)
    if status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return error_response(exc.message, error_type, status)


HTTP_STATUS_TYPES = {
    400: ErrorType.VALIDATION,
    401: ErrorType.UNAUTHORIZED,
    403: ErrorType.FORBIDDEN,
    404: ErrorType.NOT_FOUND,
    429: ErrorType.RATE_LIMITED,
}


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    error_type = HTTP_STATUS_TYPES.get(exc.status_code, ErrorType.API_ERROR)
    response = error_response(str(exc.detail), error_type, exc.status_code)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    fields = [".".join(str(part) for part in err.get("loc", [])[1:]) for err in errors]
    message = "Invalid request"
    if fields and any(fields):
        message = f"Invalid or missing fields: {', '.join(f for f in fields if f)}"
    return error_response(message, ErrorType.VALIDATION, 400)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.info(f"Rate limit hit on {request.url.path}: {exc.detail}")
    return error_response(RATE_LIMIT_MESSAGE, ErrorType.RATE_LIMITED, 429, isRateLimited=True)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PanelcraftError, panelcraft_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

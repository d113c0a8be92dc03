"""
Exception handlers for the FastAPI application.

Every error leaves the API as ``{"error": {"code", "message", "details"}}``
with camelCase detail keys, the same casing as the response models. Badge
errors never echo the caller's user id back; the badge id comes from the
request path where there is one.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..exceptions import (
    BadgeEngineError,
    ErrorCode,
    FeaturedBadgeLimitError,
    UserBadgeNotFoundError,
)
from ..models.badges import to_camel


logger = logging.getLogger(__name__)

# Status codes raised by FastAPI itself (identity headers, unknown routes)
HTTP_ERROR_CODES = {
    401: ErrorCode.UNAUTHORIZED,
    404: ErrorCode.NOT_FOUND,
}


def create_error_response(
    status_code: int,
    code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    """Create a standardized error response."""
    content: Dict[str, Any] = {
        "error": {
            "code": code,
            "message": message,
        }
    }
    if details:
        content["error"]["details"] = {to_camel(k): v for k, v in details.items()}
    return JSONResponse(status_code=status_code, content=content)


async def badge_engine_error_handler(
    request: Request,
    exc: BadgeEngineError,
) -> JSONResponse:
    """Handle all BadgeEngineError exceptions."""
    if exc.status_code >= 500:
        logger.error(f"{exc!r} on {request.method} {request.url.path}")
    body = exc.to_dict()["error"]
    return create_error_response(
        status_code=exc.status_code,
        code=body["code"],
        message=body["message"],
        details=body.get("details"),
    )


async def featured_limit_error_handler(
    request: Request,
    exc: FeaturedBadgeLimitError,
) -> JSONResponse:
    """The caller must unfeature a badge before featuring another."""
    logger.info(f"Featured limit hit on {request.url.path}")
    return create_error_response(
        status_code=exc.status_code,
        code=exc.code.value,
        message=exc.message,
        details={
            "limit": exc.details["limit"],
            "badge_id": request.path_params.get("badge_id"),
        },
    )


async def user_badge_not_found_handler(
    request: Request,
    exc: UserBadgeNotFoundError,
) -> JSONResponse:
    return create_error_response(
        status_code=exc.status_code,
        code=exc.code.value,
        message=f"Badge '{exc.details['resource_id']}' has not been earned",
        details={"badge_id": exc.details["resource_id"]},
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """Render FastAPI's own HTTP errors in the badge error envelope."""
    code = HTTP_ERROR_CODES.get(exc.status_code, ErrorCode.INTERNAL_ERROR)
    if exc.status_code < 500 and exc.status_code not in HTTP_ERROR_CODES:
        code = ErrorCode.VALIDATION_ERROR
    response = create_error_response(
        status_code=exc.status_code,
        code=code.value,
        message=str(exc.detail),
    )
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def pydantic_validation_error_handler(
    request: Request,
    exc: PydanticValidationError,
) -> JSONResponse:
    """Handle Pydantic validation errors raised outside request parsing."""
    errors = []
    for error in exc.errors():
        loc = ".".join(str(x) for x in error["loc"])
        errors.append({
            "field": loc,
            "message": error["msg"],
            "type": error["type"],
        })

    return create_error_response(
        status_code=422,
        code=ErrorCode.VALIDATION_ERROR.value,
        message="Validation failed",
        details={"errors": errors},
    )


async def generic_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=exc)

    return create_error_response(
        status_code=500,
        code=ErrorCode.INTERNAL_ERROR.value,
        message="An unexpected error occurred",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with the FastAPI application.

    Handlers are looked up by the exception's class hierarchy, so the
    specific badge errors win over the BadgeEngineError fallback.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(FeaturedBadgeLimitError, featured_limit_error_handler)
    app.add_exception_handler(UserBadgeNotFoundError, user_badge_not_found_handler)
    app.add_exception_handler(BadgeEngineError, badge_engine_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(PydanticValidationError, pydantic_validation_error_handler)
    # Catches everything else, so register last
    app.add_exception_handler(Exception, generic_exception_handler)

"""
storefront/core/errors.py

Purpose: Maps exceptions to the JSON error envelope

    {"success": false, "message": ..., "code": ..., "details": ...}
"""

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.core.config import settings
from storefront.core.exceptions import StorefrontError
from storefront.core.logging import get_logger
from storefront.schemas.response import ErrorResponse

logger = get_logger(__name__)


def error_response(status_code: int, message: str, code: str, details: Optional[Any] = None, headers=None) -> JSONResponse:
    body = ErrorResponse(message=message, code=code, details=details)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)


def add_exception_handlers(app: FastAPI):
    """
    Registers exception handlers with the FastAPI app.
    """

    @app.exception_handler(StorefrontError)
    async def storefront_exception_handler(request: Request, exc: StorefrontError):
        if exc.status_code >= 500:
            logger.error(f"{exc.code}: {exc.message}", extra={"method": request.method, "path": request.url.path})
        return error_response(exc.status_code, exc.message, exc.code, exc.details)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Unknown routes, wrong methods
        return error_response(
            exc.status_code, str(exc.detail), "HTTP_ERROR", headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        # ctx carries the raw ValueError raised by field validators
        details = [
            {key: value for key, value in error.items() if key != "ctx"}
            for error in exc.errors()
        ]
        return error_response(422, "Input validation failed", "VALIDATION_ERROR", jsonable_encoder(details))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled exception: {str(exc)}",
            extra={"method": request.method, "path": request.url.path},
            exc_info=True,
        )
        message = "An internal error occurred. Please try again later." if settings.is_production else str(exc)
        return error_response(500, message, "INTERNAL_ERROR")

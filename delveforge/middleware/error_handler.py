"""
Delveforge - Error Handler
Formats all exceptions into structured JSON responses.
"""
import logging
import traceback
import uuid
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from delveforge.core.errors import ErrorCode, GameError

logger = logging.getLogger("delveforge.errors")

_STATUS_CODES = {
    400: ErrorCode.VALIDATION_ERROR,
    404: ErrorCode.NOT_FOUND,
    422: ErrorCode.VALIDATION_ERROR,
    500: ErrorCode.UNKNOWN,
}


def _error_id() -> str:
    """Short id to correlate a response with its log line."""
    return str(uuid.uuid4())[:8]


def _envelope(code: ErrorCode, message: str, error_id: str, **extra) -> dict:
    error = {
        "code": code.value,
        "message": message,
        "details": extra.pop("details", {}),
        "recoverable": extra.pop("recoverable", True),
        "recovery_hint": extra.pop("recovery_hint", None),
        "error_id": error_id,
        "timestamp": datetime.utcnow().isoformat(),
    }
    error.update(extra)
    return {"error": error}


def setup_error_handlers(app: FastAPI, debug: bool = False):
    """
    Setup all error handlers for the FastAPI application.

    Call this function after creating the FastAPI app to register
    exception handlers for GameError and standard exceptions.
    """

    @app.exception_handler(GameError)
    async def game_error_handler(request: Request, exc: GameError):
        """Handle GameError exceptions."""
        error_id = _error_id()

        logger.warning(
            f"[{error_id}] GameError: {exc.code.value} - {exc.message}",
            extra={
                "error_id": error_id,
                "error_code": exc.code.value,
                "path": str(request.url.path),
            }
        )

        response_data = exc.to_dict()
        response_data["error"]["error_id"] = error_id
        response_data["error"]["timestamp"] = datetime.utcnow().isoformat()

        return JSONResponse(
            status_code=exc.http_status,
            content=response_data
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        """Handle Pydantic validation errors from request parsing."""
        errors = []
        for error in exc.errors():
            field = " -> ".join(str(loc) for loc in error.get("loc", []))
            errors.append({
                "field": field,
                "message": error.get("msg", "Invalid value"),
                "type": error.get("type", "validation_error")
            })

        return JSONResponse(
            status_code=422,
            content=_envelope(
                ErrorCode.VALIDATION_ERROR,
                "Request validation failed",
                _error_id(),
                details={"errors": errors},
                recovery_hint="Check the request data and correct any invalid fields",
            )
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle standard HTTP exceptions."""
        code = _STATUS_CODES.get(exc.status_code, ErrorCode.UNKNOWN)
        return JSONResponse(
            status_code=exc.status_code,
            content=_envelope(
                code,
                str(exc.detail) if exc.detail else "An error occurred",
                _error_id(),
                recoverable=exc.status_code < 500,
            )
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        """Handle all unhandled exceptions."""
        error_id = _error_id()

        logger.error(
            f"[{error_id}] Unhandled exception on {request.method} {request.url.path}: "
            f"{type(exc).__name__}: {exc}",
            extra={
                "error_id": error_id,
                "path": str(request.url.path),
                "method": request.method,
            },
            exc_info=True
        )

        content = _envelope(
            ErrorCode.UNKNOWN,
            "An unexpected error occurred",
            error_id,
            recoverable=False,
            recovery_hint="Please try again or report the error id",
        )

        if debug:
            content["error"]["debug"] = {
                "exception_type": type(exc).__name__,
                "exception_message": str(exc),
                "traceback": traceback.format_exc().split("\n")
            }

        return JSONResponse(
            status_code=500,
            content=content
        )

    return app

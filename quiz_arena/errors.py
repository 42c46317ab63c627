import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class QuizArenaError(Exception):
    """Base for errors that map onto a client-facing status code."""

    status_code = 500

    def __init__(self, message: str, errors: Optional[list[str]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors


class NotFound(QuizArenaError):
    status_code = 404


class Unauthorized(QuizArenaError):
    status_code = 401


class InvalidSubmission(QuizArenaError):
    status_code = 400


class Conflict(QuizArenaError):
    status_code = 409


def error_body(message: str, errors: Optional[list[str]] = None, **extra) -> dict:
    body = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    body.update(extra)
    return body


def _format_validation_error(err: dict) -> str:
    loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
    msg = err.get("msg", "invalid value")
    return f"{loc}: {msg}" if loc else msg


def register_error_handlers(app: FastAPI, expose_errors: bool = False):
    @app.exception_handler(QuizArenaError)
    async def handle_app_error(request: Request, exc: QuizArenaError):
        logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, exc.errors))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        errors = [_format_validation_error(e) for e in exc.errors()]
        logger.warning("%s %s -> 400: %s", request.method, request.url.path, errors)
        return JSONResponse(status_code=400, content=error_body("Invalid request data", errors))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and exc.detail == "Not Found":
            return JSONResponse(
                status_code=404,
                content=error_body("Route not found", path=request.url.path),
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        extra = {"error": str(exc)} if expose_errors else {}
        return JSONResponse(status_code=500, content=error_body("Internal server error", **extra))

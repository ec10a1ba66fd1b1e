"""
Error Handlers
==============

Every error leaves the API as {"error": "<message>"}.

- HTTPException          -> its own status code (400, 403, 404...)
- RequestValidationError -> 400 (body isn't JSON, or a field has the wrong type)
- PyMongoError           -> 500, details go to the log only
- anything else          -> 500, details go to the log only
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal Server Error"


def error_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors and all(error.get("type") == "missing" for error in errors):
        message = "Missing required fields"
    else:
        message = "Invalid request body"
    logger.info(f"[{request.url.path}] Rejected request body: {errors}")
    return error_response(400, message)


async def storage_exception_handler(request: Request, exc: PyMongoError):
    logger.error(f"[{request.url.path}] Database error: {exc}", exc_info=exc)
    return error_response(500, INTERNAL_ERROR_MESSAGE)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"[{request.url.path}] Unhandled error: {type(exc).__name__}: {exc}", exc_info=exc)
    return error_response(500, INTERNAL_ERROR_MESSAGE)


def register_exception_handlers(app: FastAPI):
    """Attach all handlers above to the app."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(PyMongoError, storage_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

import logging

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
}


class DcimsException(Exception):
    """Base exception; carries the HTTP status it maps to."""

    status_code = 500

    def __init__(self, message: str, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)


class ValidationError(DcimsException):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message, "VALIDATION_ERROR")


class AuthenticationError(DcimsException):
    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, "UNAUTHENTICATED")


class PermissionDenied(DcimsException):
    status_code = 403

    def __init__(self, message: str = "Permission denied"):
        super().__init__(message, "PERMISSION_DENIED")


class NotFoundError(DcimsException):
    status_code = 404

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, "NOT_FOUND")


class ConflictError(DcimsException):
    status_code = 409

    def __init__(self, message: str):
        super().__init__(message, "CONFLICT")


def _error_response(status_code: int, message, code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message, "code": code},
        headers=CORS_HEADERS,
    )


async def dcims_exception_handler(request: Request, exc: DcimsException):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s rejected (%s): %s", request.method, request.url.path, exc.code, exc.message)
    return _error_response(exc.status_code, exc.message, exc.code)


async def http_exception_handler(request: Request, exc: HTTPException):
    return _error_response(exc.status_code, exc.detail, "HTTP_ERROR")


async def request_validation_handler(request: Request, exc: RequestValidationError):
    messages = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        messages.append(f"{loc}: {err.get('msg')}" if loc else err.get("msg"))
    return _error_response(400, "; ".join(messages), "VALIDATION_ERROR")


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled error on %s %s: %s", request.method, request.url.path, exc, exc_info=True
    )
    return _error_response(500, str(exc) or "Internal server error", "INTERNAL_ERROR")


def register_exception_handlers(app) -> None:
    app.add_exception_handler(DcimsException, dcims_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

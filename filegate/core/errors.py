"""
Gateway error types and the handlers that render them.

Every failure leaves the gateway as the same envelope:
``{"success": false, "error": <message>, "code": <code>}``.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "REQUEST_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthenticationError(GatewayError):
    """Authorization header missing or not a bearer token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"


class SessionExpiredError(GatewayError):
    """The identity provider did not accept the token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "SESSION_EXPIRED"


class IdentityUnavailableError(GatewayError):
    """The identity provider could not be reached or failed on its side."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "IDENTITY_UNAVAILABLE"


class AccessDeniedError(GatewayError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "ACCESS_DENIED"


class ValidationError(GatewayError):
    code = "VALIDATION_ERROR"


class ConfigurationError(GatewayError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "CONFIG_ERROR"


class StorageError(GatewayError):
    status_code = status.HTTP_502_BAD_GATEWAY
    code = "STORAGE_ERROR"


class StorageUnavailableError(GatewayError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "STORAGE_UNAVAILABLE"


def error_response(status_code: int, message: str, code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message, "code": code},
    )


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s rejected (%s): %s", request.method, request.url.path, exc.code, exc.message)
    return error_response(exc.status_code, exc.message, exc.code)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request"
    return error_response(status.HTTP_400_BAD_REQUEST, message, ValidationError.code)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": str(exc.detail), "code": "HTTP_ERROR"},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", "INTERNAL_ERROR"
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

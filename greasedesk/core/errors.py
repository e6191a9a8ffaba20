from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An unexpected error occurred."


class GreaseDeskError(Exception):
    """Base error carrying the HTTP status and a stable error kind for clients."""

    status_code = 500
    error = "InternalError"
    default_message = GENERIC_ERROR_MESSAGE

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, str]:
        return {"message": self.message, "error": self.error}


class ValidationError(GreaseDeskError):
    status_code = 400
    error = "ValidationError"
    default_message = "Invalid request."


class NotAuthenticated(GreaseDeskError):
    status_code = 401
    error = "NotAuthenticated"
    default_message = "Authentication required. Please sign in."


class UserNotFound(GreaseDeskError):
    status_code = 401
    error = "UserNotFound"
    default_message = "User not found. Please sign in again."


class TenantContextMissing(GreaseDeskError):
    status_code = 409
    error = "TenantContextMissing"
    default_message = "Group/Site context not found. Please complete the previous setup steps."


class Forbidden(GreaseDeskError):
    status_code = 403
    error = "Forbidden"
    default_message = "You do not have permission to perform this action."


class AuthorizationError(Forbidden):
    error = "AuthorizationError"
    default_message = "This resource belongs to another organisation."


class EmailNotVerified(Forbidden):
    error = "EmailNotVerified"
    default_message = "Please verify your email address before signing in."


class Conflict(GreaseDeskError):
    status_code = 409
    error = "Conflict"
    default_message = "The request conflicts with existing data."


class EmailAlreadyExists(Conflict):
    error = "EmailAlreadyExists"
    default_message = "A user with this email already exists."


class NotFound(GreaseDeskError):
    status_code = 404
    error = "NotFound"
    default_message = "Resource not found."


class TokenNotFound(GreaseDeskError):
    status_code = 404
    error = "TokenNotFound"
    default_message = "Token not found or already used."


class TokenExpired(GreaseDeskError):
    status_code = 410
    error = "TokenExpired"
    default_message = "Token expired."


class InternalError(GreaseDeskError):
    pass


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(item) for item in err.get("loc", ()) if item != "body")
        message = err.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or ValidationError.default_message


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(GreaseDeskError)
    async def greasedesk_error_handler(request: Request, exc: GreaseDeskError):
        if exc.status_code >= 500:
            logger.error("request failed error=%s path=%s", exc.error, request.url.path)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        error = ValidationError(_format_validation_errors(exc))
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("database error path=%s", request.url.path)
        return JSONResponse(status_code=500, content=InternalError().to_dict())

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("unhandled error path=%s", request.url.path)
        return JSONResponse(status_code=500, content=InternalError().to_dict())

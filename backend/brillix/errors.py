# Overview: API error taxonomy and the central stage that turns exceptions into JSON envelopes.

"""
Error handling

Services and routes raise APIError subclasses for anything the client caused.
Store-level failures (model validation, unique constraint violations) are
translated here so raw database errors never reach the client.

    400  ValidationError, ConflictError, ModelValidationError, IntegrityError
    401  AuthenticationError
    403  AuthorizationError
    404  NotFoundError, unknown routes
    429  RateLimitExceeded
    500  anything else (stack only outside production)
"""

from __future__ import annotations

import re
import traceback

from flask import current_app, request
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from .extensions import db
from .responses import error_response


class APIError(Exception):
    status_code = 500

    def __init__(self, message: str, errors: list | None = None, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.errors = errors
        if status_code is not None:
            self.status_code = status_code


class ValidationError(APIError):
    """400-level input problem."""
    status_code = 400


class ConflictError(APIError):
    """Duplicate value (e.g., email already registered)."""
    status_code = 400


class AuthenticationError(APIError):
    status_code = 401


class AuthorizationError(APIError):
    status_code = 403


class NotFoundError(APIError):
    status_code = 404


class RateLimitExceeded(APIError):
    status_code = 429

    def __init__(self, message: str, retry_after: int | None = None):
        super().__init__(message)
        self.retry_after = retry_after


class ModelValidationError(ValueError):
    """Raised by model-level validation before a row is written."""

    def __init__(self, errors: list[dict]):
        super().__init__("; ".join(e["message"] for e in errors))
        self.errors = errors


# Column name -> API field name, for duplicate-key messages
FIELD_NAMES = {
    "email": "email",
    "registration_number": "registrationNumber",
    "owner_id": "owner",
    "business_id": "business",
}

_SQLITE_UNIQUE_RE = re.compile(r"UNIQUE constraint failed: [\w]+\.(\w+)")
_POSTGRES_UNIQUE_RE = re.compile(r"Key \((\w+)\)=")
_MYSQL_UNIQUE_RE = re.compile(r"for key '(?:[\w]+\.)?(?:uq_\w+?_)?(\w+)'")


def duplicate_field(exc: IntegrityError) -> str | None:
    """Best-effort extraction of the offending column from a unique violation."""
    text = str(exc.orig) if exc.orig is not None else str(exc)
    for pattern in (_SQLITE_UNIQUE_RE, _POSTGRES_UNIQUE_RE, _MYSQL_UNIQUE_RE):
        match = pattern.search(text)
        if match:
            column = match.group(1)
            return FIELD_NAMES.get(column, column)
    return None


def register_error_handlers(app) -> None:
    @app.errorhandler(APIError)
    def handle_api_error(exc: APIError):
        response, status = error_response(exc.message, exc.status_code, exc.errors)
        if isinstance(exc, RateLimitExceeded) and exc.retry_after is not None:
            response.headers["Retry-After"] = str(exc.retry_after)
        return response, status

    @app.errorhandler(ModelValidationError)
    def handle_model_validation(exc: ModelValidationError):
        db.session.rollback()
        return error_response("Validation error", 400, exc.errors)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(exc: IntegrityError):
        db.session.rollback()
        field = duplicate_field(exc)
        current_app.logger.warning("Integrity error on %s %s: %s", request.method, request.path, exc.orig)
        if field:
            return error_response(f"A record with this {field} already exists", 400)
        return error_response("Duplicate or invalid reference", 400)

    @app.errorhandler(HTTPException)
    def handle_http_exception(exc: HTTPException):
        if exc.code == 404:
            return error_response("Route not found", 404, path=request.path)
        return error_response(exc.description or exc.name, exc.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        db.session.rollback()
        current_app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        extra = {}
        if current_app.config.get("ENV") != "production":
            extra["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return error_response("Internal server error", 500, **extra)

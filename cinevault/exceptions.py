"""
Exceptions and Flask error handlers for the CineVault API.

Error Taxonomy:
- NotFoundError: the addressed entity does not exist or is soft-deleted (404)
- BadRequestError: malformed body or out-of-range input (400)
- ConflictError: a unique key is already taken (409)

Handlers render errors in the shape of the API generation that raised them:
v1 returns ``{"status": "error", "error": ...}``, v2 returns an ApiResponse
envelope. Anything unhandled surfaces as a 500.
"""

from typing import Any, Optional

from flask import Flask, jsonify, request
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from cinevault.logging_config import get_logger
from cinevault.logging_context import get_request_id
from cinevault.schemas import ApiResponse

logger = get_logger(__name__)


class CineVaultError(Exception):
    """Base exception for all catalog errors."""

    status_code = 500

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(CineVaultError):
    """Entity not found (or soft-deleted)."""
    status_code = 404


class BadRequestError(CineVaultError):
    """Request shape or value rejected."""
    status_code = 400


class ConflictError(CineVaultError):
    """Unique key violation."""
    status_code = 409


def is_v2_request() -> bool:
    blueprint = request.blueprint or ""
    if blueprint:
        return blueprint.split(".", 1)[0] == "v2"
    return request.path.startswith("/api/v2/")


def error_response(status_code: int, message: str, details: Any = None):
    """
    Build an error response shaped for the API generation being served.

    Args:
        status_code: HTTP status code
        message: Human-readable error message
        details: Optional structured details (validation errors, per-id notes)

    Returns:
        Tuple of (response, status_code) for Flask
    """
    if is_v2_request():
        envelope = ApiResponse(status_code=status_code, message=message, data=details)
        return jsonify(envelope.to_dict()), status_code

    body = {"status": "error", "error": message}
    if details is not None:
        body["details"] = details
    return jsonify(body), status_code


def register_error_handlers(app: Flask):
    """
    Register JSON error handlers on the application.

    Args:
        app: Flask application instance
    """

    @app.errorhandler(CineVaultError)
    def handle_cinevault_error(exc: CineVaultError):
        if exc.status_code >= 500:
            logger.error("request_error", status_code=exc.status_code, error=exc.message)
        else:
            logger.info("request_rejected", status_code=exc.status_code, error=exc.message)
        return error_response(exc.status_code, exc.message, exc.details)

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        errors = exc.errors(include_url=False, include_context=False, include_input=False)
        logger.info("validation_failed", error_count=len(errors))
        return error_response(400, "Validation failed", errors)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(exc: IntegrityError):
        from cinevault.models import db

        db.session.rollback()
        logger.warning("integrity_error", error=str(exc.orig))
        return error_response(409, "The request conflicts with existing data")

    @app.errorhandler(HTTPException)
    def handle_http_exception(exc: HTTPException):
        if exc.code and exc.code >= 500:
            original = getattr(exc, "original_exception", None)
            logger.error(
                "unhandled_exception",
                path=request.path,
                error=str(original or exc),
                exc_info=original or exc,
            )
            if is_v2_request():
                return error_response(exc.code, "An unexpected error occurred.", {"request_id": get_request_id()})
            body = {
                "status": "error",
                "error": "An unexpected error occurred.",
                "request_id": get_request_id(),
            }
            return jsonify(body), exc.code
        return error_response(exc.code, exc.description or exc.name)

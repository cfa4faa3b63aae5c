"""Error taxonomy shared by the API routes and their JSON rendering."""
from __future__ import annotations

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge


class ApiError(Exception):
    status_code = 500
    error = "server_error"

    def __init__(self, message: str | None = None, details: dict | None = None) -> None:
        super().__init__(message or self.error)
        self.message = message or self.error
        self.details = details

    def to_dict(self) -> dict[str, object]:
        body: dict[str, object] = {"error": self.error, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class AuthenticationError(ApiError):
    """Missing credentials or a failed login."""

    status_code = 401
    error = "unauthorized"


class ForbiddenError(ApiError):
    """Token present but invalid, expired, or lacking the privileged role."""

    status_code = 403
    error = "forbidden"


class ValidationError(ApiError):
    status_code = 400
    error = "invalid_payload"


class NotFoundError(ApiError):
    status_code = 404
    error = "not_found"


class InvalidReferenceError(ValidationError):
    """A cut pointing at a client or barber that does not exist."""

    error = "invalid_reference"


class ConflictError(ApiError):
    status_code = 409
    error = "conflict"


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ApiError)
    def handle_api_error(exc: ApiError):
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(exc: RequestEntityTooLarge):
        return jsonify({"error": "file_too_large", "message": exc.description}), 413

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        # Non-API paths keep Flask's default pages.
        if not request.path.startswith("/api"):
            return exc
        code = (exc.name or "error").lower().replace(" ", "_")
        return jsonify({"error": code, "message": exc.description}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        app.logger.exception("Unhandled error on %s %s", request.method, request.path, exc_info=exc)
        return jsonify({"error": "server_error", "message": "unexpected server error"}), 500

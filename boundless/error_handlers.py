"""JSON error responses for application and HTTP errors."""

from flask import Blueprint, current_app, jsonify
from google.api_core import exceptions as google_exceptions
from werkzeug.exceptions import BadRequest

from .core.types import ErrorResponse
from .errors import (
    AppError,
    AuthenticationError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)

error_handlers_bp = Blueprint("error_handlers", __name__)


def _error_response(message, status_code):
    return jsonify(ErrorResponse(success=False, message=message)), status_code


@error_handlers_bp.app_errorhandler(ValidationError)
def handle_validation_error(error):
    """Handles validation errors with a 400 JSON body."""
    current_app.logger.warning(f"Validation Error: {error.message}")
    return _error_response(error.message, error.status_code)


@error_handlers_bp.app_errorhandler(AuthenticationError)
def handle_authentication_error(error):
    """Handles requests without a resolved identity."""
    current_app.logger.warning(f"Authentication Error: {error.message}")
    return _error_response(error.message, error.status_code)


@error_handlers_bp.app_errorhandler(ForbiddenError)
def handle_forbidden_error(error):
    """Handles identities lacking the organization role."""
    current_app.logger.warning(f"Forbidden: {error.message}")
    return _error_response(error.message, error.status_code)


@error_handlers_bp.app_errorhandler(NotFoundError)
def handle_not_found_error(error):
    """Handles not found errors."""
    current_app.logger.warning(f"Not Found Error: {error.message}")
    return _error_response(error.message, error.status_code)


@error_handlers_bp.app_errorhandler(ConflictError)
def handle_conflict_error(error):
    """Handles operations blocked by the current resource state."""
    current_app.logger.warning(f"Conflict Error: {error.message}")
    return _error_response(error.message, error.status_code)


@error_handlers_bp.app_errorhandler(AppError)
def handle_app_error(error):
    """Handles generic application errors."""
    current_app.logger.error(f"Application Error: {error.message}")
    return _error_response(error.message, error.status_code)


@error_handlers_bp.app_errorhandler(BadRequest)
def handle_bad_request(e):
    """Handles malformed request bodies."""
    current_app.logger.warning(f"Bad Request: {e.description}")
    return _error_response("Request body must be valid JSON.", 400)


@error_handlers_bp.app_errorhandler(404)
def handle_404(e):
    """Handles generic 404 errors for routes that don't exist."""
    return _error_response("Not found.", 404)


@error_handlers_bp.app_errorhandler(405)
def handle_405(e):
    """Handles requests with an unsupported method."""
    return _error_response("Method not allowed.", 405)


@error_handlers_bp.app_errorhandler(500)
def handle_500(e):
    """Handles unexpected server errors."""
    current_app.logger.error(f"Internal Server Error: {e}")
    return _error_response("An unexpected error occurred.", 500)


@error_handlers_bp.app_errorhandler(google_exceptions.GoogleAPIError)
def handle_db_error(e):
    """Handles Firestore errors, including aborted transactions."""
    current_app.logger.error(f"Database Error: {e}")
    # Avoid exposing raw database error details to the user
    return _error_response("A database error occurred. Please try again later.", 500)

"""Convert exceptions raised by routes into the JSON error envelope."""

import logging

from flask import jsonify
from pydantic import ValidationError as PydanticValidationError
from werkzeug.exceptions import HTTPException

from motorpool.schemas.error import ErrorResponse
from motorpool.utils.exceptions import ReservationApiError

logger = logging.getLogger(__name__)


def _respond(status_code: int, code: str, message: str, field=None, details=None):
    body = ErrorResponse.build(code, message, field=field, details=details)
    return jsonify(body.model_dump(mode="json")), status_code


def register_error_handlers(app):
    """Attach the global error handlers to ``app``."""

    @app.errorhandler(ReservationApiError)
    def handle_api_error(e: ReservationApiError):
        logger.warning(f"Reservation API Error: {e.code} - {e.message}")
        return _respond(e.status_code, e.code, e.message, e.field, e.details)

    @app.errorhandler(PydanticValidationError)
    def handle_pydantic_error(e: PydanticValidationError):
        logger.warning(f"Request validation failed: {e.error_count()} error(s)")
        errors = e.errors(include_url=False, include_context=False, include_input=False)
        field = ".".join(str(p) for p in errors[0]["loc"]) if errors and errors[0].get("loc") else None
        return _respond(400, "VALIDATION_ERROR", "Invalid request body", field, {"errors": errors})

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        logger.warning(f"HTTP Exception: {e.code} - {e.description}")
        return _respond(e.code or 500, "HTTP_EXCEPTION", e.description or e.name, details={"status_code": e.code})

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.error(f"Unexpected error: {str(e)}", exc_info=True)
        return _respond(
            500,
            "INTERNAL_SERVER_ERROR",
            "An unexpected error occurred",
            details={"error_type": type(e).__name__},
        )

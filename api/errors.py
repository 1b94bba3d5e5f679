from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError
import logging

from utils.errors import ApiError

logger = logging.getLogger(__name__)


def error_response(status: int, message: str, errors: list | None = None):
    payload = {"statusCode": status, "message": message, "success": False, "errors": errors or []}
    return jsonify(payload), status


def register_error_handlers(app):
    # Domain errors raised by the services and the auth guard
    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        if err.status_code >= 500:
            logger.error("%r", err, exc_info=err.__cause__ or err)
        return jsonify(err.to_dict()), err.status_code

    # Marshmallow validation errors that escape a service map to 400
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        errors = [{"field": f, "message": m} for f, m in sorted(err.normalized_messages().items())]
        return error_response(400, "Invalid input", errors)

    # Integrity errors (unique constraints)
    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        message = str(getattr(err, "orig", err))
        if current_app and current_app.debug:
            logger.exception("Integrity error", exc_info=err)
        if "unique" in message.lower():
            return error_response(409, "Unique constraint violated.")
        return error_response(400, "Integrity error.")

    # Werkzeug HTTPExceptions (404 route, 405 method, 413 too large...) keep their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        return error_response(err.code or 400, err.description or err.name)

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logger.exception("Unhandled exception", exc_info=err)
        errors = []
        # In dev, include exception details to speed up debugging
        if current_app and current_app.debug:
            errors = [{"type": err.__class__.__name__, "message": str(err)}]
        return error_response(500, "An unexpected error occurred", errors)

"""
JSON error responses for the API

Domain errors map onto 404/400/409. Werkzeug HTTP errors keep their code
but are rendered as JSON. Anything else is an unexpected failure: logged
with its traceback and answered with a generic 500.
"""

from flask import jsonify, request
from werkzeug.exceptions import HTTPException

from backoffice.business.commerce.errors import (
    CommerceDomainError,
    ConflictError,
    NotFoundError,
)
from backoffice.logger import get_logger
from backoffice.utils.logging_sanitizer import sanitize_exception_message

logger = get_logger("backoffice.errors")


def error_response(message: str, status: int, field: str = None):
    body = {'message': message}
    if field:
        body['field'] = field
    return jsonify(body), status


def status_for(error: CommerceDomainError) -> int:
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, ConflictError):
        return 409
    # InvalidArgumentError and any other rejected input
    return 400


def register_error_handlers(app):

    @app.errorhandler(CommerceDomainError)
    def handle_domain_error(error):
        status = status_for(error)
        logger.info(f"{request.method} {request.path} -> {status}: {error}")
        return error_response(str(error), status, getattr(error, 'field', None))

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return error_response(error.description or error.name, error.code)

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        logger.error(
            f"Unhandled error on {request.method} {request.path}: {sanitize_exception_message(error)}",
            exc_info=error,
        )
        return error_response("Internal server error", 500)

"""
API error types and the Flask error handlers that turn them into JSON responses
"""
import logging
import traceback
from datetime import datetime
from typing import Any, Dict, Optional

from flask import jsonify, request
import newrelic.agent
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException, NotFound, RequestEntityTooLarge

from app.services import messages

logger = logging.getLogger(__name__)


class APIError(Exception):
    """
    Error raised by the services layer.

    ``is_server_error`` errors hide their message from the client and are
    reported as an unknown server error.
    """
    status_code = 400
    is_server_error = False

    def __init__(self, message: str, status_code: Optional[int] = None,
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.context = context or {}


class BadRequestError(APIError):
    status_code = 400


class NotFoundError(APIError):
    status_code = 400


class PreconditionError(APIError):
    status_code = 400


class UnauthorizedError(APIError):
    status_code = 401


class ForbiddenError(APIError):
    status_code = 403


class ConflictError(APIError):
    status_code = 409


class RateLimitError(APIError):
    status_code = 429


class ServerError(APIError):
    status_code = 500
    is_server_error = True


def require_text(**fields):
    """Reject submitted values that are present but not strings, naming the offending fields"""
    not_text = [name for name, value in fields.items()
                if value is not None and not isinstance(value, str)]
    if not_text:
        raise BadRequestError(messages.missing_parameters(*not_text))


def api_response(message: str, data: Any = None, status_code: int = 200, success: bool = True):
    """Build the uniform ``{message, success, data}`` JSON envelope"""
    return jsonify({
        'message': message,
        'success': success,
        'data': data,
    }), status_code


def _report_to_newrelic(error: Exception, context: Dict[str, Any]):
    newrelic.agent.notice_error(
        error=(type(error), error, error.__traceback__),
        attributes={key: str(value) for key, value in context.items()}
    )


def _log_server_error(error: Exception, context: Dict[str, Any]):
    logger.error(
        f"Server error - Type: {type(error).__name__}, Message: {error}",
        extra={
            'event_type': 'server_error',
            'endpoint': context.get('endpoint'),
            'timestamp': datetime.utcnow().isoformat(),
            'traceback': ''.join(traceback.format_exception(type(error), error, error.__traceback__)),
        }
    )


def handle_api_error(error: APIError):
    context = dict(error.context, endpoint=request.endpoint, method=request.method)

    if error.is_server_error:
        _log_server_error(error, context)
        _report_to_newrelic(error, context)
        return api_response(messages.UNKNOWN_ERROR, status_code=error.status_code, success=False)

    logger.warning(f"Request rejected ({error.status_code}): {error.message}", extra={
        'event_type': 'request_rejected',
        'endpoint': request.endpoint,
        'status_code': error.status_code,
    })
    return api_response(error.message, status_code=error.status_code, success=False)


def create_error_handlers(app):
    """
    Register the JSON error handlers on the Flask application

    Args:
        app: Flask application instance
    """

    app.register_error_handler(APIError, handle_api_error)

    @app.errorhandler(SQLAlchemyError)
    def handle_sqlalchemy_error(error):
        """Database errors are never shown to the client"""
        context = {'endpoint': request.endpoint, 'method': request.method}
        _log_server_error(error, context)
        _report_to_newrelic(error, context)
        return api_response(messages.UNKNOWN_ERROR, status_code=500, success=False)

    @app.errorhandler(RequestEntityTooLarge)
    def handle_request_too_large(error):
        logger.warning(f"Upload rejected: {request.content_length} bytes")
        return api_response(messages.FILE_EXCEED_LIMIT, status_code=400, success=False)

    @app.errorhandler(NotFound)
    def handle_not_found(error):
        return api_response(messages.NOT_FOUND, status_code=404, success=False)

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        return api_response(error.description, status_code=error.code, success=False)

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        context = {'endpoint': request.endpoint, 'method': request.method}
        _log_server_error(error, context)
        _report_to_newrelic(error, context)
        return api_response(messages.UNKNOWN_ERROR, status_code=500, success=False)

    logger.info("Error handlers registered successfully")

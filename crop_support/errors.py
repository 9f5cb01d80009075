# API error types and JSON error handlers
import logging
import traceback

from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ApiError):
    status_code = 400


class AuthenticationError(ApiError):
    status_code = 401


class PermissionDenied(ApiError):
    status_code = 403


class NotFoundError(ApiError):
    status_code = 404


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(error):
        return jsonify({'success': False, 'message': error.message}), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'success': False, 'message': error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        logger.exception('Unhandled error: %s', error)
        payload = {'success': False, 'message': 'Internal server error'}
        # Stack detail only outside production
        if current_app.config.get('APP_ENV') != 'production':
            payload['error'] = str(error)
            payload['traceback'] = traceback.format_exc()
        return jsonify(payload), 500

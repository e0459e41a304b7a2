from flask import current_app, jsonify, redirect, request
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from .models import db


class PastelFeedError(Exception):
    status_code = 500
    message = 'Internal server error'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class InvalidInput(PastelFeedError):
    status_code = 400
    message = 'Invalid input'


class Unauthorized(PastelFeedError):
    status_code = 401
    message = 'Unauthorized'


class Conflict(PastelFeedError):
    status_code = 400
    message = 'Already exists'


class NotFound(PastelFeedError):
    status_code = 404
    message = 'Not found'


class Internal(PastelFeedError):
    status_code = 500


def _is_api_request():
    return request.path == '/api' or request.path.startswith('/api/')


def _internal_response(exc):
    body = {'error': Internal.message}
    if current_app.debug:
        body['message'] = str(exc)
    return jsonify(body), 500


def register_error_handlers(app):
    @app.errorhandler(PastelFeedError)
    def handle_app_error(exc):
        if exc.status_code >= 500:
            current_app.logger.error(f'{request.method} {request.path} failed: {exc.message}')
        return jsonify({'error': exc.message}), exc.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_db_error(exc):
        db.session.rollback()
        current_app.logger.exception(f'Database error on {request.method} {request.path}')
        return _internal_response(exc)

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(exc):
        if _is_api_request():
            return jsonify({'error': 'Upload is too large'}), 400
        return redirect('/')

    @app.errorhandler(404)
    def handle_not_found(exc):
        if _is_api_request():
            current_app.logger.info(f'API route not found: {request.path}')
            return jsonify({'error': 'API route not found', 'path': request.path}), 404
        return redirect('/')

    @app.errorhandler(HTTPException)
    def handle_http_error(exc):
        if _is_api_request():
            return jsonify({'error': exc.description}), exc.code
        return exc

    @app.errorhandler(Exception)
    def handle_unexpected(exc):
        current_app.logger.exception(f'Unhandled error on {request.method} {request.path}')
        if _is_api_request():
            return _internal_response(exc)
        return redirect('/')

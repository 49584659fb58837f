"""
PinkStar - Custom Exceptions and Exception Handlers
"""
import structlog
from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from api_responses import ErrorCode

logger = structlog.get_logger('exceptions')


class PinkStarException(Exception):
    """Base exception for PinkStar"""
    status_code = 400

    def __init__(self, message: str, code: str = ErrorCode.UNKNOWN_ERROR):
        self.message = message
        self.code = code
        super().__init__(message)

    def to_dict(self):
        return {
            'success': False,
            'error': self.message,
            'errorCode': self.code,
        }


class ValidationException(PinkStarException):
    """Validation-related exceptions"""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message, code=ErrorCode.VALIDATION_ERROR)
        logger.warning(f"Validation error: {message}")


class NotFoundException(PinkStarException):
    """Missing project, category, resource, review or profile"""
    status_code = 404

    def __init__(self, message: str = "Not found"):
        super().__init__(message, code=ErrorCode.NOT_FOUND)


class AuthenticationException(PinkStarException):
    """Authentication-related exceptions"""
    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code=ErrorCode.AUTH_REQUIRED)
        logger.warning(f"Authentication error: {message}")


class AuthorizationException(PinkStarException):
    """Authorization-related exceptions"""
    status_code = 403

    def __init__(self, message: str = "Access denied"):
        super().__init__(message, code=ErrorCode.FORBIDDEN)
        logger.warning(f"Authorization error: {message}")


class NotAuthorException(PinkStarException):
    """Raised when an author tries to review their own resource"""
    status_code = 403

    def __init__(self, message: str = "You cannot review your own resource."):
        super().__init__(message, code=ErrorCode.NOT_AUTHOR)


class AlreadyReviewedException(PinkStarException):
    """One review per user and resource"""
    status_code = 409

    def __init__(self, message: str = "You have already reviewed this resource. You can edit your existing review."):
        super().__init__(message, code=ErrorCode.ALREADY_REVIEWED)


HTTP_ERROR_CODES = {
    401: ErrorCode.AUTH_REQUIRED,
    403: ErrorCode.FORBIDDEN,
    404: ErrorCode.NOT_FOUND,
    400: ErrorCode.VALIDATION_ERROR,
}


def register_exception_handlers(app):
    """Register exception handlers with Flask app"""
    from db import db

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        """Handle HTTP exceptions"""
        return jsonify({
            'success': False,
            'error': e.description,
            'errorCode': HTTP_ERROR_CODES.get(e.code, e.name.upper().replace(' ', '_')),
        }), e.code

    @app.errorhandler(PinkStarException)
    def handle_pinkstar_exception(e):
        """Handle PinkStar domain exceptions"""
        db.session.rollback()
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_exception(e):
        """Handle database errors without leaking details"""
        db.session.rollback()
        logger.error(f"Database error: {e}", exc_info=True)
        return jsonify({
            'success': False,
            'error': 'A database error occurred',
            'errorCode': ErrorCode.DB_ERROR,
        }), 500

    @app.errorhandler(Exception)
    def handle_generic_exception(e):
        """Handle all other exceptions"""
        db.session.rollback()
        logger.error(f"Unhandled exception: {e}", exc_info=True)
        return jsonify({
            'success': False,
            'error': 'An unexpected error occurred',
            'errorCode': ErrorCode.UNKNOWN_ERROR,
        }), 500

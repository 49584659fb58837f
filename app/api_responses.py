"""
API Response Utilities - Standardized action envelopes

Every action answers with
    {"success": bool, "data"?: ..., "error"?: str, "errorCode"?: str}
"""

from flask import jsonify
from functools import wraps
from sqlalchemy.exc import SQLAlchemyError
import structlog

from db import db

logger = structlog.get_logger("actions")


# API Error Codes
class ErrorCode:
    AUTH_REQUIRED = "AUTH_REQUIRED"
    FORBIDDEN = "FORBIDDEN"
    NOT_AUTHOR = "NOT_AUTHOR"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_REVIEWED = "ALREADY_REVIEWED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    DB_ERROR = "DB_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


DEFAULT_MESSAGES = {
    ErrorCode.AUTH_REQUIRED: "Authentication required",
    ErrorCode.FORBIDDEN: "Access forbidden",
    ErrorCode.NOT_FOUND: "Resource not found",
    ErrorCode.VALIDATION_ERROR: "Invalid request parameters",
    ErrorCode.DB_ERROR: "A database error occurred",
    ErrorCode.UNKNOWN_ERROR: "An unexpected error occurred",
}


def success_response(data=None, status_code=200):
    """
    Standard success response format for action endpoints
    """
    response = {"success": True}

    if data is not None:
        response["data"] = data

    return jsonify(response), status_code


def error_response(error_code=ErrorCode.UNKNOWN_ERROR, message=None, status_code=400):
    """
    Standard error response format for action endpoints
    """
    response = {
        "success": False,
        "error": message or DEFAULT_MESSAGES.get(error_code, "Request failed"),
        "errorCode": error_code,
    }
    return jsonify(response), status_code


def paginated_response(items, total, page, per_page):
    """
    Standard paginated response format for list endpoints
    """
    return success_response(
        {
            "items": items,
            "total": total,
            "page": page,
            "perPage": per_page,
            "hasMore": page * per_page < total,
        }
    )


def handle_action_errors(f):
    """
    Decorator for action endpoints: turns domain exceptions into envelopes,
    rolls the session back on any failure and never leaks database details.
    """

    @wraps(f)
    def wrapper(*args, **kwargs):
        from exceptions import PinkStarException

        try:
            return f(*args, **kwargs)
        except PinkStarException as e:
            db.session.rollback()
            return error_response(e.code, message=e.message, status_code=e.status_code)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error("database error in action", action=f.__name__, error=str(e), exc_info=True)
            return error_response(ErrorCode.DB_ERROR, status_code=500)
        except Exception as e:
            db.session.rollback()
            logger.error("unhandled exception in action", action=f.__name__, error=str(e), exc_info=True)
            return error_response(ErrorCode.UNKNOWN_ERROR, status_code=500)

    return wrapper

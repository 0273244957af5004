from flask import jsonify, current_app
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException


class ApiError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message=None, status_code=None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        if status_code:
            self.status_code = status_code

    def to_dict(self):
        return {"error": self.message}


class ValidationFailed(ApiError):
    status_code = 400
    message = "Invalid request data"

    def __init__(self, message=None, errors=None):
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def from_pydantic(cls, exc, message=None):
        errors = []
        for err in exc.errors():
            field = ".".join(str(part) for part in err.get("loc", ())) or "__root__"
            errors.append({"field": field, "message": err.get("msg", "Invalid value")})
        return cls(message, errors)

    @classmethod
    def for_field(cls, field, problem, message=None):
        return cls(message, [{"field": field, "message": problem}])

    def to_dict(self):
        return {"error": self.message, "errors": self.errors}


class Unauthorized(ApiError):
    status_code = 401
    message = "Authentication required"


class Forbidden(ApiError):
    status_code = 403
    message = "Access forbidden: insufficient permissions"


class NotFound(ApiError):
    status_code = 404
    message = "Not found"


class Conflict(ApiError):
    status_code = 409
    message = "Conflict"


def register_error_handlers(app):
    from attendance.extensions import db

    @app.errorhandler(ApiError)
    def handle_api_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(ValidationError)
    def handle_pydantic_error(error):
        failed = ValidationFailed.from_pydantic(error)
        return jsonify(failed.to_dict()), failed.status_code

    @app.errorhandler(429)
    def handle_rate_limit(error):
        return jsonify({"error": "Rate limit exceeded. Please slow down."}), 429

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({"error": error.description or error.name}), error.code

    @app.errorhandler(SQLAlchemyError)
    def handle_storage_error(error):
        db.session.rollback()
        current_app.logger.exception("Storage failure: %s", error)
        return jsonify({"error": "Internal server error"}), 500

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        current_app.logger.exception("Unhandled error: %s", error)
        return jsonify({"error": "Internal server error"}), 500

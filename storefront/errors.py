from flask import jsonify


class ApiError(Exception):
    status_code = 500
    message = "Server error"

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_response(self):
        return jsonify({"error": self.message}), self.status_code


class Unauthorized(ApiError):
    status_code = 401
    message = "Unauthorized"


class NotFound(ApiError):
    status_code = 404
    message = "Not found"


class MissingFields(ApiError):
    status_code = 400
    message = "Missing fields"


class InvalidField(ApiError):
    status_code = 400
    message = "Invalid field"


class StorageError(ApiError):
    status_code = 500
    message = "Storage error"


def handle_api_error(error):
    return error.to_response()


def register_error_handlers(app):
    app.register_error_handler(ApiError, handle_api_error)

"""Error types surfaced to API clients.

Every failure a handler wants the caller to see is raised as an ``ApiError``
subclass; the application's error handler turns it into the standard
``{"success": false, "message": ...}`` envelope with the matching status.
"""


class ApiError(Exception):
    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self):
        return {"success": False, "message": self.message}


class ValidationError(ApiError):
    status_code = 400
    default_message = "Validation failed"

    def __init__(self, errors=None, message=None):
        super().__init__(message)
        # list of {"field": ..., "message": ...}
        self.errors = errors or []

    def to_dict(self):
        body = super().to_dict()
        if self.errors:
            body["errors"] = self.errors
        return body

    @classmethod
    def for_field(cls, field, message):
        return cls([{"field": field, "message": message}])


class Unauthenticated(ApiError):
    status_code = 401
    default_message = "Authentication required. Please log in."


class Forbidden(ApiError):
    status_code = 403
    default_message = "Access denied"


class NotFound(ApiError):
    status_code = 404
    default_message = "Not Found"


class StorageError(ApiError):
    status_code = 502
    default_message = "File storage request failed"

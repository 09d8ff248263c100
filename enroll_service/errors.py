from typing import List, Optional


class EnrollmentServiceError(Exception):
    """Base for errors the API turns into a ``{message, errors}`` response."""

    status_code = 500

    def __init__(self, message: str, errors: Optional[List[dict]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors

    def to_body(self) -> dict:
        body = {"message": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationError(EnrollmentServiceError):
    status_code = 400


class NotFound(EnrollmentServiceError):
    status_code = 404


class InvalidSignature(EnrollmentServiceError):
    status_code = 400


class GatewayError(EnrollmentServiceError):
    status_code = 500


class InternalError(EnrollmentServiceError):
    status_code = 500


class EnrollmentFailed(EnrollmentServiceError):
    """A step after the course lookup failed; ``cause`` is the underlying error."""

    status_code = 500

    def __init__(self, cause: Exception, message: str = "Failed to create enrollment"):
        super().__init__(message)
        self.cause = cause


class ServiceUnavailable(InternalError):
    """The database could not be reached at all."""

    status_code = 503

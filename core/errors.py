"""
Service-level errors.

Every error carries the HTTP status the API layer answers with, so routes
never translate exceptions by hand.
"""


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.message}
        body.update(self.details)
        return body


class ValidationError(ServiceError):
    """Malformed or missing input."""
    status_code = 400


class AuthenticationError(ServiceError):
    """No valid credentials were presented."""
    status_code = 401


class AuthorizationError(ServiceError):
    """Caller lacks the role, or owns a different resource."""
    status_code = 403


class NotFoundError(ServiceError):
    status_code = 404


class StoreError(ServiceError):
    """Underlying persistence failure."""
    status_code = 500

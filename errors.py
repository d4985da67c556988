"""
Failures raised by the repositories.

Routes never catch these; main.py maps each one to an HTTP status.
"""


class ReportingError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ReportingError):
    """Payload violates a field constraint."""

    status_code = 422

    def __init__(self, field: str, reason: str):
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason


class AuthorizationError(ReportingError):
    status_code = 403


class NotFoundError(ReportingError):
    status_code = 404


class StorageError(ReportingError):
    """Backing store unreachable or rejected the operation."""

    status_code = 503

"""Custom application exceptions."""


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500):
        """Initialize exception with message and status code."""
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class InvalidArgumentException(AppException):
    """Request failed validation."""

    def __init__(self, message: str = "Invalid request"):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)


class UnauthenticatedException(AppException):
    """Caller could not be authenticated."""

    def __init__(self, message: str = "Unauthenticated"):
        """Initialize with 401 status code."""
        super().__init__(message, status_code=401)


class InternalError(AppException):
    """Service invariant was broken."""

    def __init__(self, message: str = "Internal error"):
        """Initialize with 500 status code."""
        super().__init__(message, status_code=500)

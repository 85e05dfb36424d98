"""Custom exceptions for smilehub."""


class SmileHubError(Exception):
    """Base exception for all smilehub errors."""

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ConnectionError(SmileHubError):
    """Transport-level failure or unexpected HTTP status from a gateway."""

    def __init__(self, message: str, details: str | None = None, status: int | None = None):
        super().__init__(message, details)
        self.status = status


class TimeoutError(ConnectionError):
    """Gateway call exceeded its time bound."""

    def __init__(self, operation: str, timeout: float):
        message = f"{operation} timed out after {timeout}s"
        super().__init__(message)
        self.operation = operation
        self.timeout = timeout


class AuthenticationError(SmileHubError):
    """Credential rejected by the gateway (HTTP 401)."""

    pass


class ParseError(SmileHubError):
    """Malformed or unusable XML payload."""

    pass


class NotConnectedError(SmileHubError):
    """Operation requires a connected gateway session."""

    def __init__(self, operation: str):
        super().__init__(f"Not connected: call connect() before {operation}")
        self.operation = operation


class ValidationError(SmileHubError):
    """Input validation error."""

    pass


class StorageError(SmileHubError):
    """Hub registry could not be read or written."""

    pass

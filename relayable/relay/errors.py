from typing import Optional


class RelayError(Exception):
    """Base class for errors raised by relayable."""


class BackendError(RelayError):
    """
    A request to the assistant backend was rejected or could not be delivered.

    The originating SDK exception is chained as __cause__.
    """

    def __init__(self, message: str, operation: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code


class MalformedResponseError(RelayError):
    """The backend returned a content item that cannot be normalized."""


class ConfigurationError(RelayError):
    """Required settings are missing or a configured class cannot be loaded."""

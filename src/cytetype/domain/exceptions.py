"""Domain exceptions for the CyteType job client."""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Failure classes carried by CyteTypeAPIError."""

    AUTH = "auth"
    NETWORK = "network"
    API = "api"
    TIMEOUT = "timeout"
    NOT_FOUND = "notFound"


class DomainException(Exception):
    """Base exception for all domain errors."""
    pass


class ConfigurationError(DomainException):
    """Raised when configuration is invalid."""
    pass


class PayloadValidationError(DomainException):
    """Raised when a request payload fails schema validation."""
    pass


class PollCancelledError(DomainException):
    """Raised when the caller cancels an in-progress poll."""
    pass


class CyteTypeAPIError(DomainException):
    """
    Classified failure of a remote call.

    The kind is assigned where the failure is first detected. Outer layers
    re-raise the same instance instead of wrapping it, so the poller can
    branch on ``kind`` reliably.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        status_code: Optional[int] = None
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code

    @property
    def is_auth(self) -> bool:
        """Check if this is an authentication/authorization failure."""
        return self.kind is ErrorKind.AUTH

    @property
    def is_retryable(self) -> bool:
        """Only network failures are retried by the poller."""
        return self.kind is ErrorKind.NETWORK

    def __str__(self) -> str:
        return f"CyteType API Error [{self.kind.value}]: {self.message}"


class JobSubmissionError(CyteTypeAPIError):
    """Raised when a job could not be submitted."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(ErrorKind.API, message, status_code=status_code)


class JobFailedError(CyteTypeAPIError):
    """Raised when the server reports that the job failed."""

    def __init__(self, message: str):
        super().__init__(ErrorKind.API, f"Server error: {message}")


class PollTimeoutError(CyteTypeAPIError):
    """Raised when the overall polling budget is exhausted."""

    def __init__(self, message: str = "Timeout while fetching results"):
        super().__init__(ErrorKind.TIMEOUT, message)

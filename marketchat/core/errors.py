"""Error types raised by the transport and storage layers."""

from enum import Enum


class ErrorKind(str, Enum):
    """Category of a failure, shared by exceptions and result values."""

    NETWORK = "network"
    TIMEOUT = "timeout"
    HTTP = "http"
    UNAUTHORIZED = "unauthorized"
    INVALID_RESPONSE = "invalid_response"
    VALIDATION = "validation"
    UNAUTHENTICATED = "unauthenticated"


class ApiError(Exception):
    """Raised when a call to the remote REST API does not succeed.

    Attributes:
        kind: Failure category (network, timeout, http, unauthorized, invalid_response).
        message: Server-supplied message when one was returned, or a transport
            description for network and timeout failures. None when the server
            gave no usable message.
        status_code: HTTP status code, if a response was received.
    """

    def __init__(self, kind: ErrorKind, message: str | None = None, status_code: int | None = None):
        self.kind = kind
        self.message = message
        self.status_code = status_code
        super().__init__(message or kind.value)

    @property
    def is_unauthorized(self) -> bool:
        return self.kind == ErrorKind.UNAUTHORIZED


class StorageError(Exception):
    """Raised when the credential store cannot be read or written."""

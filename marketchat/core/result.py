"""Result values returned by session and conversation operations.

Store-level operations never raise for expected failures. They return either
``Ok(value)`` or ``Err(failure)`` so callers branch on the value instead of
catching exceptions:

    >>> result = await session.login("a@b.c", "secret")
    >>> if result.ok:
    ...     print(result.value.username)
    ... else:
    ...     print(result.failure.message)
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from marketchat.core.errors import ApiError, ErrorKind

T = TypeVar("T")


@dataclass(frozen=True)
class Failure:
    """Structured failure reason.

    Attributes:
        kind: Failure category.
        message: Human-readable reason suitable for display.
        status_code: HTTP status code when the failure came from a response.
    """

    kind: ErrorKind
    message: str
    status_code: int | None = None

    @classmethod
    def from_api_error(cls, error: ApiError, fallback: str) -> "Failure":
        """Build a failure from an API error, preferring the server's message.

        Args:
            error: The error raised by the transport layer.
            fallback: Message used when the error carries none.

        Returns:
            Failure with the same kind and status code.
        """
        return cls(kind=error.kind, message=error.message or fallback, status_code=error.status_code)

    @classmethod
    def validation(cls, message: str) -> "Failure":
        return cls(kind=ErrorKind.VALIDATION, message=message)


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying a value."""

    value: T

    @property
    def ok(self) -> bool:
        return True

    @property
    def failure(self) -> None:
        return None


@dataclass(frozen=True)
class Err:
    """Failed outcome carrying a Failure."""

    failure: Failure

    @property
    def ok(self) -> bool:
        return False

    @property
    def value(self) -> None:
        return None


Result = Union[Ok[T], Err]

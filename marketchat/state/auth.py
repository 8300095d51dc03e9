"""Auth slice: session state, actions and reducer.

The slice is a frozen dataclass. ``reduce_auth`` is a pure function; it
returns the same object for actions it does not handle so callers can
detect no-op dispatches by identity.
"""

from dataclasses import dataclass, replace
from enum import Enum

from marketchat.model.user import User


class AuthStatus(str, Enum):
    """Session resolution state."""

    UNKNOWN = "unknown"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class AuthState:
    """Authenticated identity and credential for the current run.

    Attributes:
        user: Verified current user (None when signed out or not yet verified).
        token: Bearer credential (never None while user is set).
        status: Session resolution state.
        is_loading: True until the stored-credential check has finished.
        is_submitting: True while a login or signup request is in flight.
        error: Last login/signup failure message.
    """

    user: User | None = None
    token: str | None = None
    status: AuthStatus = AuthStatus.UNKNOWN
    is_loading: bool = True
    is_submitting: bool = False
    error: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.status == AuthStatus.AUTHENTICATED

    @property
    def user_id(self) -> str | None:
        return self.user.id if self.user else None


# Actions


@dataclass(frozen=True)
class AuthCheckStarted:
    """Stored-credential check began."""


@dataclass(frozen=True)
class AuthCheckFinished:
    """Stored-credential check ended, whatever the outcome."""


@dataclass(frozen=True)
class SessionRestored:
    """A stored credential was verified by the server."""

    token: str
    user: User


@dataclass(frozen=True)
class SessionCleared:
    """Credential dropped: logout, failed verification or server rejection."""


@dataclass(frozen=True)
class AuthRequestStarted:
    """Login or signup request sent."""


@dataclass(frozen=True)
class AuthSucceeded:
    """Login or signup accepted."""

    token: str
    user: User


@dataclass(frozen=True)
class AuthFailed:
    """Login or signup rejected."""

    error: str


@dataclass(frozen=True)
class TokenRefreshed:
    token: str


@dataclass(frozen=True)
class AuthErrorCleared:
    pass


def reduce_auth(state: AuthState, action: object) -> AuthState:
    """Apply an action to the auth slice.

    Args:
        state: Current auth slice.
        action: Any action; unrelated actions leave the slice untouched.

    Returns:
        The next auth slice.
    """
    if isinstance(action, AuthCheckStarted):
        return replace(state, is_loading=True)
    if isinstance(action, AuthCheckFinished):
        if state.status == AuthStatus.UNKNOWN:
            return replace(state, status=AuthStatus.UNAUTHENTICATED, is_loading=False)
        return replace(state, is_loading=False)
    if isinstance(action, (SessionRestored, AuthSucceeded)):
        return replace(
            state,
            token=action.token,
            user=action.user,
            status=AuthStatus.AUTHENTICATED,
            is_submitting=False,
            error=None,
        )
    if isinstance(action, SessionCleared):
        return replace(
            state,
            token=None,
            user=None,
            status=AuthStatus.UNAUTHENTICATED,
            is_submitting=False,
            error=None,
        )
    if isinstance(action, AuthRequestStarted):
        return replace(state, is_submitting=True, error=None)
    if isinstance(action, AuthFailed):
        return replace(state, is_submitting=False, error=action.error)
    if isinstance(action, TokenRefreshed):
        if state.status != AuthStatus.AUTHENTICATED:
            return state
        return replace(state, token=action.token)
    if isinstance(action, AuthErrorCleared):
        return replace(state, error=None)
    return state

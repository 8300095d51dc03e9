"""Session manager: authentication lifecycle for the current run.

This module resolves whether a valid session exists at startup, performs
login, signup and logout, and keeps persisted credentials in step with the
auth slice of the application state.

State machine::

    UNKNOWN --check_auth_status--> AUTHENTICATED | UNAUTHENTICATED
    UNAUTHENTICATED --login/signup--> AUTHENTICATED
    AUTHENTICATED --logout / credential rejected--> UNAUTHENTICATED
"""

import json
import logging

from marketchat.api.auth import AuthAPI
from marketchat.api.schemas.auth import SignupRequest
from marketchat.core.errors import ApiError, ErrorKind, StorageError
from marketchat.core.result import Err, Failure, Ok, Result
from marketchat.model.user import AuthGrant, User
from marketchat.state.auth import (
    AuthCheckFinished,
    AuthCheckStarted,
    AuthErrorCleared,
    AuthFailed,
    AuthRequestStarted,
    AuthState,
    AuthStatus,
    AuthSucceeded,
    SessionCleared,
    SessionRestored,
    TokenRefreshed,
)
from marketchat.state.store import Store
from marketchat.stores.credentials import TOKEN_KEY, USER_KEY, CredentialStore

logger = logging.getLogger(__name__)


class SessionManager:
    """Owns the credential and current-user pair.

    Only this class writes the auth slice and the credential store. Storage
    failures are never fatal: they are logged and resolve to the
    unauthenticated state.

    Example:
        >>> manager = SessionManager(store, AuthAPI(api_client), FileCredentialStore(path))
        >>> await manager.check_auth_status()
        <AuthStatus.UNAUTHENTICATED: 'unauthenticated'>
        >>> result = await manager.login("ana@example.com", "hunter2")
        >>> result.ok
        True
    """

    def __init__(self, store: Store, auth_api: AuthAPI, credentials: CredentialStore):
        """Initialize the session manager.

        Args:
            store: Application state store (auth slice is written here).
            auth_api: Auth endpoint collaborator.
            credentials: Persistent credential store.
        """
        self.store = store
        self.auth_api = auth_api
        self.credentials = credentials

    @property
    def state(self) -> AuthState:
        return self.store.state.auth

    @property
    def is_authenticated(self) -> bool:
        return self.state.is_authenticated

    @property
    def is_loading(self) -> bool:
        return self.state.is_loading

    @property
    def current_user(self) -> User | None:
        return self.state.user

    async def check_auth_status(self) -> AuthStatus:
        """Resolve the session from persisted credentials.

        Verification is attempted only when both a token and a user snapshot
        are stored; the session then takes the user returned by the server,
        not the snapshot. A rejected credential is purged. Any other failure
        leaves the session unauthenticated. Loading always clears.

        Returns:
            The resulting session status.
        """
        self.store.dispatch(AuthCheckStarted())
        try:
            token = await self.credentials.get(TOKEN_KEY)
            snapshot = await self.credentials.get(USER_KEY)

            if not token or not snapshot:
                logger.info("No stored credential, session is unauthenticated")
                self.store.dispatch(SessionCleared())
            else:
                try:
                    user = await self.auth_api.get_current_user(token=token)
                except ApiError as e:
                    logger.info(f"Stored credential rejected ({e.kind.value}), purging")
                    await self._purge_credentials()
                    self.store.dispatch(SessionCleared())
                else:
                    self.store.dispatch(SessionRestored(token=token, user=user))
                    logger.info(f"Session restored for user {user.id}")
        except StorageError as e:
            logger.error(f"Error reading stored credentials: {e}")
            self.store.dispatch(SessionCleared())
        except Exception as e:
            logger.error(f"Unexpected error checking auth status: {e}", exc_info=True)
            self.store.dispatch(SessionCleared())
        finally:
            self.store.dispatch(AuthCheckFinished())

        return self.state.status

    async def login(self, email: str, password: str) -> Result[User]:
        """Authenticate with email and password.

        Args:
            email: Account email.
            password: Account password.

        Returns:
            Ok(user) on success; Err with the server's reason otherwise.
        """
        if not email.strip() or not password:
            return self._reject(Failure.validation("Email and password are required"))

        self.store.dispatch(AuthRequestStarted())
        try:
            grant = await self.auth_api.login(email.strip(), password)
        except ApiError as e:
            return self._reject(Failure.from_api_error(e, "Login failed"))

        await self._establish(grant)
        logger.info(f"User {grant.user.id} logged in")
        return Ok(grant.user)

    async def signup(
        self,
        email: str,
        password: str,
        username: str,
        first_name: str,
        last_name: str,
    ) -> Result[User]:
        """Create an account and sign in with it.

        Returns:
            Ok(user) on success; Err with the server's reason otherwise.
        """
        fields = {
            "email": email.strip(),
            "password": password,
            "username": username.strip(),
            "first_name": first_name.strip(),
            "last_name": last_name.strip(),
        }
        missing = [name for name, value in fields.items() if not value]
        if missing:
            return self._reject(Failure.validation(f"Missing required field(s): {', '.join(missing)}"))

        self.store.dispatch(AuthRequestStarted())
        try:
            grant = await self.auth_api.signup(SignupRequest(**fields))
        except ApiError as e:
            return self._reject(Failure.from_api_error(e, "Signup failed"))

        await self._establish(grant)
        logger.info(f"User {grant.user.id} signed up")
        return Ok(grant.user)

    async def logout(self) -> Result[None]:
        """Sign out.

        The remote call is best-effort; local credentials are purged and the
        session becomes unauthenticated regardless of its outcome.
        """
        token = self.state.token
        if token:
            try:
                await self.auth_api.logout(token=token)
            except ApiError as e:
                logger.warning(f"Logout API error (ignored): {e}")

        await self._purge_credentials()
        self.store.dispatch(SessionCleared())
        logger.info("User logged out")
        return Ok(None)

    async def refresh_token(self) -> Result[str]:
        """Exchange the current token for a fresh one and persist it."""
        if not self.is_authenticated:
            return Err(Failure(kind=ErrorKind.UNAUTHENTICATED, message="Not signed in"))
        try:
            token = await self.auth_api.refresh_token()
        except ApiError as e:
            return Err(Failure.from_api_error(e, "Token refresh failed"))

        self.store.dispatch(TokenRefreshed(token=token))
        try:
            await self.credentials.set(TOKEN_KEY, token)
        except StorageError as e:
            logger.error(f"Failed to persist refreshed token: {e}")
        return Ok(token)

    async def forgot_password(self, email: str) -> Result[None]:
        """Ask the server to send a password reset email."""
        if not email.strip():
            return Err(Failure.validation("Email is required"))
        try:
            await self.auth_api.forgot_password(email.strip())
        except ApiError as e:
            return Err(Failure.from_api_error(e, "Failed to send reset email"))
        return Ok(None)

    async def reset_password(self, token: str, new_password: str) -> Result[None]:
        """Set a new password using a reset token."""
        if not token.strip() or not new_password:
            return Err(Failure.validation("Reset token and new password are required"))
        try:
            await self.auth_api.reset_password(token.strip(), new_password)
        except ApiError as e:
            return Err(Failure.from_api_error(e, "Failed to reset password"))
        return Ok(None)

    async def handle_unauthorized(self, rejected_token: str) -> None:
        """React to the server rejecting a credential.

        Only the credential that was rejected is affected: a 401 answering a
        request sent with a token the session has since replaced (logout and
        a new login, or a refresh) is ignored. Does not retry.

        Args:
            rejected_token: Bearer token the rejected request was sent with.
        """
        if self.state.token is not None and self.state.token != rejected_token:
            logger.info("Ignoring 401 for a credential that is no longer in use")
            return

        try:
            stored_token = await self.credentials.get(TOKEN_KEY)
        except StorageError as e:
            logger.error(f"Error reading stored credentials: {e}")
            stored_token = None
        if stored_token == rejected_token:
            await self._purge_credentials()

        if self.state.token == rejected_token:
            logger.warning("Credential rejected by server, ending session")
            self.store.dispatch(SessionCleared())

    def clear_error(self) -> None:
        """Dismiss the last login or signup failure."""
        self.store.dispatch(AuthErrorCleared())

    def _reject(self, failure: Failure) -> Err:
        self.store.dispatch(AuthFailed(error=failure.message))
        logger.info(f"Authentication failed: {failure.message}")
        return Err(failure)

    async def _establish(self, grant: AuthGrant) -> None:
        """Persist a new grant and mark the session authenticated."""
        try:
            await self.credentials.set(TOKEN_KEY, grant.token)
            await self.credentials.set(USER_KEY, json.dumps(grant.user.to_dict()))
        except StorageError as e:
            # Session still works for this run; it just won't survive a restart
            logger.error(f"Failed to persist credentials: {e}")
        self.store.dispatch(AuthSucceeded(token=grant.token, user=grant.user))

    async def _purge_credentials(self) -> None:
        try:
            await self.credentials.remove(TOKEN_KEY)
            await self.credentials.remove(USER_KEY)
        except StorageError as e:
            logger.error(f"Error clearing stored credentials: {e}")
            try:
                await self.credentials.clear()
            except StorageError as wipe_error:
                logger.error(f"Error wiping credential store: {wipe_error}")

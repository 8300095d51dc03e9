"""Auth endpoint wrappers."""

import logging

from marketchat.api.client import ApiClient, parse_response
from marketchat.api.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    ResetPasswordRequest,
    SignupRequest,
    TokenResponse,
    UserSchema,
)
from marketchat.model.user import AuthGrant, User

logger = logging.getLogger(__name__)


class AuthAPI:
    """Typed access to /auth/* endpoints.

    Methods return domain objects and raise ApiError on failure. Nothing here
    touches credential storage; persisting the grant is the session
    manager's job.
    """

    def __init__(self, client: ApiClient):
        self.client = client

    async def login(self, email: str, password: str) -> AuthGrant:
        body = LoginRequest(email=email, password=password).to_wire()
        data = await self.client.post("/auth/login", json=body, authenticate=False)
        return parse_response(AuthResponse, data).to_domain()

    async def signup(self, request: SignupRequest) -> AuthGrant:
        data = await self.client.post("/auth/signup", json=request.to_wire(), authenticate=False)
        return parse_response(AuthResponse, data).to_domain()

    async def logout(self, token: str | None = None) -> None:
        await self.client.post("/auth/logout", token=token)

    async def refresh_token(self) -> str:
        data = await self.client.post("/auth/refresh")
        return parse_response(TokenResponse, data).token

    async def get_current_user(self, token: str | None = None) -> User:
        """Fetch the user the bearer token belongs to.

        Args:
            token: Token to verify; defaults to the session token.

        Returns:
            The verified User.

        Raises:
            ApiError: UNAUTHORIZED if the token is invalid or expired.
        """
        data = await self.client.get("/auth/me", token=token)
        return parse_response(UserSchema, data).to_domain()

    async def forgot_password(self, email: str) -> None:
        body = ForgotPasswordRequest(email=email).to_wire()
        await self.client.post("/auth/forgot-password", json=body, authenticate=False)

    async def reset_password(self, token: str, new_password: str) -> None:
        body = ResetPasswordRequest(token=token, new_password=new_password).to_wire()
        await self.client.post("/auth/reset-password", json=body, authenticate=False)

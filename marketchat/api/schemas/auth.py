"""Pydantic schemas for the auth endpoints."""

from pydantic import Field

from marketchat.api.schemas.common import WireModel
from marketchat.model.user import AuthGrant, User


class UserSchema(WireModel):
    """User record as returned by /auth/login, /auth/signup and /auth/me."""

    id: str = Field(min_length=1)
    email: str
    username: str
    first_name: str = ""
    last_name: str = ""
    avatar: str | None = None
    phone: str | None = None
    location: str | None = None

    def to_domain(self) -> User:
        return User(
            id=self.id,
            email=self.email,
            username=self.username,
            first_name=self.first_name,
            last_name=self.last_name,
            avatar=self.avatar,
            phone=self.phone,
            location=self.location,
        )


class AuthResponse(WireModel):
    """Response body of POST /auth/login and POST /auth/signup."""

    user: UserSchema
    token: str = Field(min_length=1)

    def to_domain(self) -> AuthGrant:
        return AuthGrant(user=self.user.to_domain(), token=self.token)


class TokenResponse(WireModel):
    """Response body of POST /auth/refresh."""

    token: str = Field(min_length=1)


class LoginRequest(WireModel):
    """Request body of POST /auth/login."""

    email: str
    password: str


class SignupRequest(WireModel):
    """Request body of POST /auth/signup.

    Attributes:
        email: Account email address.
        password: Chosen password.
        username: Public handle.
        first_name: Given name.
        last_name: Family name.
    """

    email: str
    password: str
    username: str
    first_name: str
    last_name: str


class ForgotPasswordRequest(WireModel):
    email: str


class ResetPasswordRequest(WireModel):
    token: str
    new_password: str

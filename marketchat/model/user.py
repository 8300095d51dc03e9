"""Domain models for users and authentication grants."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class User:
    """Identity record of a marketplace user.

    Attributes:
        id: Server-assigned user identifier.
        email: Account email address.
        username: Public handle.
        first_name: Given name.
        last_name: Family name.
        avatar: Avatar image URL, if set.
        phone: Phone number, if set.
        location: Free-form location, if set.
    """

    id: str
    email: str
    username: str
    first_name: str
    last_name: str
    avatar: str | None = None
    phone: str | None = None
    location: str | None = None

    @property
    def display_name(self) -> str:
        """Full name when available, otherwise the username."""
        full_name = f"{self.first_name} {self.last_name}".strip()
        return full_name or self.username

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase snapshot format persisted alongside the token.

        Returns:
            Dictionary representation suitable for JSON serialization.
        """
        data: dict[str, Any] = {
            "id": self.id,
            "email": self.email,
            "username": self.username,
            "firstName": self.first_name,
            "lastName": self.last_name,
        }
        for key, value in (("avatar", self.avatar), ("phone", self.phone), ("location", self.location)):
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        """Create instance from a camelCase snapshot.

        Args:
            data: Dictionary produced by to_dict().

        Returns:
            User instance.
        """
        return cls(
            id=data["id"],
            email=data["email"],
            username=data["username"],
            first_name=data.get("firstName", ""),
            last_name=data.get("lastName", ""),
            avatar=data.get("avatar"),
            phone=data.get("phone"),
            location=data.get("location"),
        )


@dataclass(frozen=True)
class AuthGrant:
    """Successful login or signup: the verified user plus a bearer token."""

    user: User
    token: str

"""Domain models for conversations and messages."""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any


class MessageType(str, Enum):
    """Kind of message payload."""

    TEXT = "text"
    IMAGE = "image"
    FILE = "file"


@dataclass(frozen=True)
class Message:
    """A single message in a two-party conversation.

    Conversation membership is not stored on the message; it is established
    by the call that fetched or sent it.

    Attributes:
        id: Server-assigned message identifier.
        text: Message body.
        sender_id: User who sent the message.
        receiver_id: User the message is addressed to.
        timestamp: When the server recorded the message.
        is_read: Whether the receiver has acknowledged it.
        type: Payload kind (only text is rendered by the client).
        metadata: Optional type-specific data.
    """

    id: str
    text: str
    sender_id: str
    receiver_id: str
    timestamp: datetime
    is_read: bool = False
    type: MessageType = MessageType.TEXT
    metadata: dict[str, Any] | None = None

    def mark_read(self) -> "Message":
        """Return a copy flagged as read (self when already read)."""
        if self.is_read:
            return self
        return replace(self, is_read=True)

    def is_addressed_to(self, user_id: str | None) -> bool:
        return user_id is not None and self.receiver_id == user_id


@dataclass(frozen=True)
class Conversation:
    """A message thread between exactly two users.

    Attributes:
        id: Server-assigned conversation identifier.
        participants: The two participant user IDs.
        updated_at: Time of the most recent activity.
        last_message: Most recent message, cached for list display.
        unread_count: Messages addressed to the current user not yet acknowledged.
        product_id: Product the conversation is about, if any.
    """

    id: str
    participants: tuple[str, str]
    updated_at: datetime
    last_message: Message | None = None
    unread_count: int = 0
    product_id: str | None = None

    def other_participant(self, user_id: str | None) -> str | None:
        """Return the participant that is not ``user_id``.

        Args:
            user_id: Current user's ID.

        Returns:
            The counterpart's ID, or None when user_id is missing or not a participant.
        """
        if user_id is None or user_id not in self.participants:
            return None
        others = [p for p in self.participants if p != user_id]
        return others[0] if others else None

    def with_last_message(self, message: Message) -> "Conversation":
        """Return a copy whose last_message and updated_at reflect ``message``."""
        return replace(self, last_message=message, updated_at=message.timestamp)

"""Pydantic schemas for the chat endpoints."""

from typing import Any

from pydantic import Field

from marketchat.api.schemas.common import UtcDatetime, WireModel
from marketchat.model.chat import Conversation, Message, MessageType


class MessageSchema(WireModel):
    """Message as returned by the chat endpoints."""

    id: str = Field(min_length=1)
    text: str
    sender_id: str
    receiver_id: str
    timestamp: UtcDatetime
    is_read: bool = False
    type: MessageType = MessageType.TEXT
    metadata: dict[str, Any] | None = None
    conversation_id: str | None = None

    def to_domain(self) -> Message:
        return Message(
            id=self.id,
            text=self.text,
            sender_id=self.sender_id,
            receiver_id=self.receiver_id,
            timestamp=self.timestamp,
            is_read=self.is_read,
            type=self.type,
            metadata=self.metadata,
        )


class ConversationSchema(WireModel):
    """Conversation as returned by the chat endpoints.

    Participants must be exactly two user IDs; group threads are rejected.
    """

    id: str = Field(min_length=1)
    participants: list[str] = Field(min_length=2, max_length=2)
    last_message: MessageSchema | None = None
    unread_count: int = Field(default=0, ge=0)
    updated_at: UtcDatetime
    product_id: str | None = None

    def to_domain(self) -> Conversation:
        return Conversation(
            id=self.id,
            participants=(self.participants[0], self.participants[1]),
            updated_at=self.updated_at,
            last_message=self.last_message.to_domain() if self.last_message else None,
            unread_count=self.unread_count,
            product_id=self.product_id,
        )


class ConversationsResponse(WireModel):
    """Response body of GET /chat/conversations."""

    conversations: list[ConversationSchema]


class MessagesResponse(WireModel):
    """Response body of GET /chat/conversations/{id}/messages."""

    messages: list[MessageSchema]
    conversation: ConversationSchema | None = None


class SendMessageRequest(WireModel):
    """Request body of POST /chat/messages."""

    text: str
    receiver_id: str
    conversation_id: str | None = None
    product_id: str | None = None


class SendMessageResponse(WireModel):
    """Response body of POST /chat/messages."""

    message: MessageSchema
    conversation_id: str = Field(min_length=1)


class CreateConversationRequest(WireModel):
    participant_id: str
    product_id: str | None = None


class ConversationResponse(WireModel):
    """Response body of POST /chat/conversations."""

    conversation: ConversationSchema


class UpdateMessageRequest(WireModel):
    text: str


class MessageResponse(WireModel):
    """Response body of PUT /chat/messages/{id}."""

    message: MessageSchema


class UnreadCountResponse(WireModel):
    """Response body of GET /chat/unread-count."""

    unread_count: int = Field(ge=0)


class ParticipantSchema(WireModel):
    """Participant summary returned by GET /chat/conversations/{id}/participants."""

    id: str
    username: str
    avatar: str | None = None
    is_online: bool = False


class ParticipantsResponse(WireModel):
    participants: list[ParticipantSchema]

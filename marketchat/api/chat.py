"""Chat endpoint wrappers."""

from dataclasses import dataclass

from marketchat.api.client import ApiClient, parse_response
from marketchat.api.schemas.chat import (
    ConversationResponse,
    ConversationsResponse,
    CreateConversationRequest,
    MessageResponse,
    MessagesResponse,
    ParticipantSchema,
    ParticipantsResponse,
    SendMessageRequest,
    SendMessageResponse,
    UnreadCountResponse,
    UpdateMessageRequest,
)
from marketchat.model.chat import Conversation, Message


@dataclass(frozen=True)
class MessagePage:
    """Messages of one conversation, plus the conversation if the server sent it."""

    messages: tuple[Message, ...]
    conversation: Conversation | None = None


@dataclass(frozen=True)
class SentMessage:
    """Server-confirmed message and the conversation it landed in."""

    message: Message
    conversation_id: str


class ChatAPI:
    """Typed access to /chat/* endpoints. Raises ApiError on failure."""

    def __init__(self, client: ApiClient):
        self.client = client

    async def get_conversations(self) -> tuple[Conversation, ...]:
        data = await self.client.get("/chat/conversations")
        response = parse_response(ConversationsResponse, data)
        return tuple(c.to_domain() for c in response.conversations)

    async def get_messages(self, conversation_id: str) -> MessagePage:
        data = await self.client.get(f"/chat/conversations/{conversation_id}/messages")
        response = parse_response(MessagesResponse, data)
        return MessagePage(
            messages=tuple(m.to_domain() for m in response.messages),
            conversation=response.conversation.to_domain() if response.conversation else None,
        )

    async def send_message(
        self,
        text: str,
        receiver_id: str,
        conversation_id: str | None = None,
        product_id: str | None = None,
    ) -> SentMessage:
        body = SendMessageRequest(
            text=text,
            receiver_id=receiver_id,
            conversation_id=conversation_id,
            product_id=product_id,
        ).to_wire()
        data = await self.client.post("/chat/messages", json=body)
        response = parse_response(SendMessageResponse, data)
        return SentMessage(message=response.message.to_domain(), conversation_id=response.conversation_id)

    async def mark_as_read(self, conversation_id: str) -> None:
        await self.client.put(f"/chat/conversations/{conversation_id}/read")

    async def create_conversation(self, participant_id: str, product_id: str | None = None) -> Conversation:
        body = CreateConversationRequest(participant_id=participant_id, product_id=product_id).to_wire()
        data = await self.client.post("/chat/conversations", json=body)
        return parse_response(ConversationResponse, data).conversation.to_domain()

    async def delete_conversation(self, conversation_id: str) -> None:
        await self.client.delete(f"/chat/conversations/{conversation_id}")

    async def delete_message(self, message_id: str) -> None:
        await self.client.delete(f"/chat/messages/{message_id}")

    async def update_message(self, message_id: str, text: str) -> Message:
        body = UpdateMessageRequest(text=text).to_wire()
        data = await self.client.put(f"/chat/messages/{message_id}", json=body)
        return parse_response(MessageResponse, data).message.to_domain()

    async def get_unread_count(self) -> int:
        data = await self.client.get("/chat/unread-count")
        return parse_response(UnreadCountResponse, data).unread_count

    async def get_participants(self, conversation_id: str) -> list[ParticipantSchema]:
        data = await self.client.get(f"/chat/conversations/{conversation_id}/participants")
        return parse_response(ParticipantsResponse, data).participants

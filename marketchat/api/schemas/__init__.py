"""Pydantic request and response schemas for the marketplace REST API."""

from marketchat.api.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    ResetPasswordRequest,
    SignupRequest,
    TokenResponse,
    UserSchema,
)
from marketchat.api.schemas.chat import (
    ConversationResponse,
    ConversationSchema,
    ConversationsResponse,
    CreateConversationRequest,
    MessageResponse,
    MessageSchema,
    MessagesResponse,
    ParticipantSchema,
    ParticipantsResponse,
    SendMessageRequest,
    SendMessageResponse,
    UnreadCountResponse,
    UpdateMessageRequest,
)
from marketchat.api.schemas.common import WireModel

__all__ = [
    "WireModel",
    # Auth
    "AuthResponse",
    "ForgotPasswordRequest",
    "LoginRequest",
    "ResetPasswordRequest",
    "SignupRequest",
    "TokenResponse",
    "UserSchema",
    # Chat
    "ConversationResponse",
    "ConversationSchema",
    "ConversationsResponse",
    "CreateConversationRequest",
    "MessageResponse",
    "MessageSchema",
    "MessagesResponse",
    "ParticipantSchema",
    "ParticipantsResponse",
    "SendMessageRequest",
    "SendMessageResponse",
    "UnreadCountResponse",
    "UpdateMessageRequest",
]

"""MarketChat domain models - pure business entities.

This package contains immutable dataclasses and enums for users,
conversations and messages. They have no dependencies on transport or
storage, and are the values held in the application state.
"""

from marketchat.model.chat import Conversation, Message, MessageType
from marketchat.model.user import AuthGrant, User

__all__ = [
    # User
    "AuthGrant",
    "User",
    # Chat
    "Conversation",
    "Message",
    "MessageType",
]

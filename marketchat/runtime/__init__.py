"""Runtime services for MarketChat.

This package provides the session manager and the conversation store.
"""

from marketchat.runtime.chat import ConversationStore
from marketchat.runtime.session import SessionManager

__all__ = [
    "ConversationStore",
    "SessionManager",
]

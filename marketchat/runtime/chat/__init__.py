"""Chat subsystem for MarketChat.

Provides the conversation store plus pure selectors and display helpers.
"""

from marketchat.runtime.chat.display import format_last_message_time, participant_label
from marketchat.runtime.chat.selectors import (
    filter_conversations,
    other_participant,
    sort_conversations,
    total_unread,
)
from marketchat.runtime.chat.store import ConversationStore

__all__ = [
    "ConversationStore",
    "filter_conversations",
    "format_last_message_time",
    "other_participant",
    "participant_label",
    "sort_conversations",
    "total_unread",
]

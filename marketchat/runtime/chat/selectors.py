"""Pure read-side helpers over cached conversations.

Nothing here calls the server or mutates its inputs.
"""

from collections.abc import Callable, Iterable, Sequence

from marketchat.model.chat import Conversation

NameResolver = Callable[[str | None], str]


def other_participant(conversation: Conversation, current_user_id: str | None) -> str | None:
    """Return the counterpart of ``current_user_id`` in a conversation.

    Args:
        conversation: Two-party conversation.
        current_user_id: Signed-in user's ID, if known.

    Returns:
        The other participant's ID, or None when it cannot be resolved
        (no current user, or the current user is not a participant).
    """
    return conversation.other_participant(current_user_id)


def filter_conversations(
    conversations: Sequence[Conversation],
    query: str,
    current_user_id: str | None,
    name_for: NameResolver,
) -> list[Conversation]:
    """Filter conversations by the other participant's display name.

    Matching is a case-insensitive substring test. A blank query returns
    every conversation. The input sequence is left untouched; a new list is
    always returned.

    Args:
        conversations: Cached conversation list.
        query: Search text.
        current_user_id: Signed-in user's ID, used to pick the counterpart.
        name_for: Maps a participant ID (or None) to its display name.

    Returns:
        Matching conversations in their original order.
    """
    needle = query.strip().casefold()
    if not needle:
        return list(conversations)
    return [
        c for c in conversations
        if needle in name_for(other_participant(c, current_user_id)).casefold()
    ]


def sort_conversations(conversations: Iterable[Conversation]) -> list[Conversation]:
    """Order conversations by most recent activity, newest first."""
    return sorted(conversations, key=lambda c: c.updated_at, reverse=True)


def total_unread(conversations: Iterable[Conversation]) -> int:
    """Sum of unread counts across conversations."""
    return sum(c.unread_count for c in conversations)

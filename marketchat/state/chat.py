"""Chat slice: conversation list, open thread, actions and reducer.

Read state is a whole-thread approximation: marking a conversation read
zeroes its unread count and flags every held message as read.

Stale results are dropped inside the reducer. Each fetch carries the
sequence number it was issued with; only the newest fetch for the open
conversation is applied. Messages confirmed by a send while a message
fetch was in flight are kept if the fetched page does not contain them.
"""

from dataclasses import dataclass, replace
from enum import Enum

from marketchat.model.chat import Conversation, Message
from marketchat.state.auth import AuthSucceeded, SessionCleared


class ThreadStatus(str, Enum):
    """Load state of the open conversation thread."""

    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    SENDING = "sending"


@dataclass(frozen=True)
class ChatState:
    """Conversation list and the open conversation's messages.

    Attributes:
        conversations: Cached conversation list, as last fetched plus local updates.
        current_conversation_id: Conversation whose messages are held, if any.
        messages: Messages of the open conversation, oldest first.
        messages_loaded: A message fetch for the open conversation has been applied.
        messages_loading: A message fetch for the open conversation is in flight.
        messages_request_seq: Sequence number of the newest message fetch.
        appended_during_fetch: Sent or received messages applied while a fetch was in flight.
        sends_in_flight: Number of send requests awaiting a response.
        marking_read: Conversations with a mark-read request in flight.
        conversations_loading: A conversation list fetch is in flight.
        conversations_request_seq: Sequence number of the newest list fetch.
        unread_total: Server-reported total unread count, kept in step locally.
        error: Last failure message.
    """

    conversations: tuple[Conversation, ...] = ()
    current_conversation_id: str | None = None
    messages: tuple[Message, ...] = ()
    messages_loaded: bool = False
    messages_loading: bool = False
    messages_request_seq: int = 0
    appended_during_fetch: tuple[Message, ...] = ()
    sends_in_flight: int = 0
    marking_read: frozenset[str] = frozenset()
    conversations_loading: bool = False
    conversations_request_seq: int = 0
    unread_total: int | None = None
    error: str | None = None

    @property
    def thread_status(self) -> ThreadStatus:
        if self.current_conversation_id is None:
            return ThreadStatus.IDLE
        if self.messages_loading:
            return ThreadStatus.LOADING
        if self.sends_in_flight:
            return ThreadStatus.SENDING
        if self.messages_loaded:
            return ThreadStatus.LOADED
        return ThreadStatus.IDLE

    @property
    def current_conversation(self) -> Conversation | None:
        return self.find_conversation(self.current_conversation_id)

    @property
    def is_loading(self) -> bool:
        return self.conversations_loading or self.messages_loading

    def find_conversation(self, conversation_id: str | None) -> Conversation | None:
        if conversation_id is None:
            return None
        for conversation in self.conversations:
            if conversation.id == conversation_id:
                return conversation
        return None


# Actions


@dataclass(frozen=True)
class ConversationsRequested:
    seq: int


@dataclass(frozen=True)
class ConversationsLoaded:
    seq: int
    conversations: tuple[Conversation, ...]


@dataclass(frozen=True)
class ConversationsFailed:
    seq: int
    error: str


@dataclass(frozen=True)
class ConversationOpened:
    conversation_id: str


@dataclass(frozen=True)
class ConversationClosed:
    pass


@dataclass(frozen=True)
class MessagesRequested:
    conversation_id: str
    seq: int


@dataclass(frozen=True)
class MessagesLoaded:
    conversation_id: str
    seq: int
    messages: tuple[Message, ...]


@dataclass(frozen=True)
class MessagesFailed:
    conversation_id: str
    seq: int
    error: str


@dataclass(frozen=True)
class SendStarted:
    pass


@dataclass(frozen=True)
class SendSucceeded:
    conversation_id: str
    message: Message


@dataclass(frozen=True)
class SendFailed:
    error: str


@dataclass(frozen=True)
class MarkReadStarted:
    conversation_id: str


@dataclass(frozen=True)
class MarkReadSucceeded:
    conversation_id: str


@dataclass(frozen=True)
class MarkReadFailed:
    conversation_id: str
    error: str


@dataclass(frozen=True)
class ConversationCreated:
    conversation: Conversation


@dataclass(frozen=True)
class ConversationDeleted:
    conversation_id: str


@dataclass(frozen=True)
class MessageDeleted:
    message_id: str


@dataclass(frozen=True)
class MessageUpdated:
    message: Message


@dataclass(frozen=True)
class MessageReceived:
    """A message obtained outside a full fetch (e.g. polling)."""

    conversation_id: str
    message: Message
    current_user_id: str | None


@dataclass(frozen=True)
class UnreadTotalLoaded:
    count: int


@dataclass(frozen=True)
class ChatFailed:
    """Failure of a chat mutation that has no dedicated failure action."""

    error: str


@dataclass(frozen=True)
class ChatErrorCleared:
    pass


def _close_thread(state: ChatState) -> ChatState:
    return replace(
        state,
        current_conversation_id=None,
        messages=(),
        messages_loaded=False,
        messages_loading=False,
        appended_during_fetch=(),
    )


def _append_to_thread(state: ChatState, message: Message) -> ChatState:
    """Append (or replace by id) a message in the open thread."""
    if any(m.id == message.id for m in state.messages):
        messages = tuple(message if m.id == message.id else m for m in state.messages)
    else:
        messages = state.messages + (message,)
    appended = state.appended_during_fetch
    if state.messages_loading:
        appended = appended + (message,)
    return replace(state, messages=messages, appended_during_fetch=appended)


def _update_conversation(state: ChatState, conversation_id: str, update) -> tuple[Conversation, ...]:
    return tuple(update(c) if c.id == conversation_id else c for c in state.conversations)


def reduce_chat(state: ChatState, action: object) -> ChatState:
    """Apply an action to the chat slice.

    Args:
        state: Current chat slice.
        action: Any action; unrelated actions leave the slice untouched.

    Returns:
        The next chat slice.
    """
    if isinstance(action, (SessionCleared, AuthSucceeded)):
        # Cached chat data belongs to the previous identity
        return ChatState()

    # Conversation list
    if isinstance(action, ConversationsRequested):
        return replace(state, conversations_loading=True, conversations_request_seq=action.seq, error=None)
    if isinstance(action, ConversationsLoaded):
        if action.seq != state.conversations_request_seq:
            return state
        return replace(state, conversations=action.conversations, conversations_loading=False, error=None)
    if isinstance(action, ConversationsFailed):
        if action.seq != state.conversations_request_seq:
            return state
        return replace(state, conversations_loading=False, error=action.error)

    # Open thread
    if isinstance(action, ConversationOpened):
        if action.conversation_id == state.current_conversation_id:
            return state
        return replace(_close_thread(state), current_conversation_id=action.conversation_id)
    if isinstance(action, ConversationClosed):
        return _close_thread(state)
    if isinstance(action, MessagesRequested):
        if action.conversation_id != state.current_conversation_id:
            return state
        return replace(
            state,
            messages_loading=True,
            messages_request_seq=action.seq,
            appended_during_fetch=(),
            error=None,
        )
    if isinstance(action, MessagesLoaded):
        if action.conversation_id != state.current_conversation_id or action.seq != state.messages_request_seq:
            return state
        fetched_ids = {m.id for m in action.messages}
        carried = tuple(m for m in state.appended_during_fetch if m.id not in fetched_ids)
        return replace(
            state,
            messages=action.messages + carried,
            messages_loaded=True,
            messages_loading=False,
            appended_during_fetch=(),
            error=None,
        )
    if isinstance(action, MessagesFailed):
        if action.conversation_id != state.current_conversation_id or action.seq != state.messages_request_seq:
            return state
        return replace(state, messages_loading=False, appended_during_fetch=(), error=action.error)

    # Sending
    if isinstance(action, SendStarted):
        return replace(state, sends_in_flight=state.sends_in_flight + 1, error=None)
    if isinstance(action, SendSucceeded):
        next_state = replace(
            state,
            sends_in_flight=max(0, state.sends_in_flight - 1),
            conversations=_update_conversation(
                state, action.conversation_id, lambda c: c.with_last_message(action.message)
            ),
        )
        if action.conversation_id == state.current_conversation_id:
            next_state = _append_to_thread(next_state, action.message)
        return next_state
    if isinstance(action, SendFailed):
        return replace(state, sends_in_flight=max(0, state.sends_in_flight - 1), error=action.error)

    # Read state
    if isinstance(action, MarkReadStarted):
        return replace(state, marking_read=state.marking_read | {action.conversation_id})
    if isinstance(action, MarkReadSucceeded):
        conversation = state.find_conversation(action.conversation_id)
        unread_total = state.unread_total
        if unread_total is not None and conversation is not None:
            unread_total = max(0, unread_total - conversation.unread_count)
        next_state = replace(
            state,
            marking_read=state.marking_read - {action.conversation_id},
            conversations=_update_conversation(state, action.conversation_id, lambda c: replace(c, unread_count=0)),
            unread_total=unread_total,
        )
        if action.conversation_id == state.current_conversation_id:
            next_state = replace(next_state, messages=tuple(m.mark_read() for m in state.messages))
        return next_state
    if isinstance(action, MarkReadFailed):
        return replace(state, marking_read=state.marking_read - {action.conversation_id}, error=action.error)

    # Collaborator mutations
    if isinstance(action, ConversationCreated):
        created = action.conversation
        if state.find_conversation(created.id) is not None:
            return replace(state, conversations=_update_conversation(state, created.id, lambda c: created))
        return replace(state, conversations=(created,) + state.conversations)
    if isinstance(action, ConversationDeleted):
        next_state = replace(
            state,
            conversations=tuple(c for c in state.conversations if c.id != action.conversation_id),
        )
        if action.conversation_id == state.current_conversation_id:
            next_state = _close_thread(next_state)
        return next_state
    if isinstance(action, MessageDeleted):
        return replace(state, messages=tuple(m for m in state.messages if m.id != action.message_id))
    if isinstance(action, MessageUpdated):
        updated = action.message
        return replace(
            state,
            messages=tuple(updated if m.id == updated.id else m for m in state.messages),
            conversations=tuple(
                replace(c, last_message=updated) if c.last_message and c.last_message.id == updated.id else c
                for c in state.conversations
            ),
        )
    if isinstance(action, MessageReceived):
        return _receive(state, action)
    if isinstance(action, UnreadTotalLoaded):
        return replace(state, unread_total=action.count)

    if isinstance(action, ChatFailed):
        return replace(state, error=action.error)
    if isinstance(action, ChatErrorCleared):
        return replace(state, error=None)
    return state


def _receive(state: ChatState, action: MessageReceived) -> ChatState:
    """Apply a pulled message to the list entry and, if open, the thread."""
    message = action.message
    is_open = action.conversation_id == state.current_conversation_id
    counts_as_unread = (
        not is_open
        and not message.is_read
        and message.is_addressed_to(action.current_user_id)
    )

    def update(conversation: Conversation) -> Conversation:
        updated = conversation.with_last_message(message)
        if counts_as_unread:
            updated = replace(updated, unread_count=conversation.unread_count + 1)
        return updated

    unread_total = state.unread_total
    if counts_as_unread and unread_total is not None and state.find_conversation(action.conversation_id):
        unread_total += 1

    next_state = replace(
        state,
        conversations=_update_conversation(state, action.conversation_id, update),
        unread_total=unread_total,
    )
    if is_open:
        next_state = _append_to_thread(next_state, message)
    return next_state

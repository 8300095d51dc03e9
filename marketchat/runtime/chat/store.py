"""Conversation store: the client's view of conversations and the open thread.

Every operation follows request, await, apply: nothing is written to the
state before the server confirms it, and a failed call leaves previously
cached data in place. Operations return Result values instead of raising.
"""

import itertools
import logging
from collections.abc import Sequence

from marketchat.api.chat import ChatAPI
from marketchat.core.errors import ApiError, ErrorKind
from marketchat.core.result import Err, Failure, Ok, Result
from marketchat.model.chat import Conversation, Message
from marketchat.runtime.chat.display import participant_label
from marketchat.runtime.chat.selectors import (
    NameResolver,
    filter_conversations,
    other_participant,
    sort_conversations,
    total_unread,
)
from marketchat.state.chat import (
    ChatErrorCleared,
    ChatFailed,
    ChatState,
    ConversationClosed,
    ConversationCreated,
    ConversationDeleted,
    ConversationOpened,
    ConversationsFailed,
    ConversationsLoaded,
    ConversationsRequested,
    MarkReadFailed,
    MarkReadStarted,
    MarkReadSucceeded,
    MessageDeleted,
    MessageReceived,
    MessagesFailed,
    MessagesLoaded,
    MessagesRequested,
    MessageUpdated,
    SendFailed,
    SendStarted,
    SendSucceeded,
    UnreadTotalLoaded,
)
from marketchat.state.store import Store

logger = logging.getLogger(__name__)

NOT_SIGNED_IN = Failure(kind=ErrorKind.UNAUTHENTICATED, message="You must be signed in")


class ConversationStore:
    """Reads and mutates the chat slice through the chat API.

    The store depends on the session only through the auth slice, for the
    current user's ID.

    Example:
        >>> chat = ConversationStore(store, ChatAPI(api_client))
        >>> await chat.fetch_conversations()
        >>> await chat.fetch_messages("c1")
        >>> result = await chat.send_message("Still available?", receiver_id="u2", conversation_id="c1")
    """

    def __init__(self, store: Store, chat_api: ChatAPI, sort_by_activity: bool = True):
        """Initialize the conversation store.

        Args:
            store: Application state store (chat slice is written here).
            chat_api: Chat endpoint collaborator.
            sort_by_activity: Order ``conversations`` newest first.
        """
        self.store = store
        self.chat_api = chat_api
        self.sort_by_activity = sort_by_activity
        self._seq = itertools.count(1)

    # =========================================================================
    # Read side
    # =========================================================================

    @property
    def state(self) -> ChatState:
        return self.store.state.chat

    @property
    def current_user_id(self) -> str | None:
        return self.store.state.auth.user_id

    @property
    def conversations(self) -> list[Conversation]:
        if self.sort_by_activity:
            return sort_conversations(self.state.conversations)
        return list(self.state.conversations)

    @property
    def messages(self) -> tuple[Message, ...]:
        return self.state.messages

    @property
    def current_conversation(self) -> Conversation | None:
        return self.state.current_conversation

    @property
    def total_unread(self) -> int:
        return total_unread(self.state.conversations)

    @property
    def error(self) -> str | None:
        return self.state.error

    def other_participant(self, conversation: Conversation) -> str | None:
        """The counterpart of the current user, or None when unknown."""
        return other_participant(conversation, self.current_user_id)

    def search(self, query: str, name_for: NameResolver = participant_label) -> list[Conversation]:
        """Filter cached conversations by the counterpart's display name.

        Args:
            query: Case-insensitive search text.
            name_for: Maps a participant ID to its display name.

        Returns:
            Matching conversations, in the same order as ``conversations``.
        """
        return filter_conversations(self.conversations, query, self.current_user_id, name_for)

    # =========================================================================
    # Conversation list
    # =========================================================================

    async def fetch_conversations(self) -> Result[tuple[Conversation, ...]]:
        """Replace the cached conversation list with the server's.

        Returns:
            Ok(conversations) on success. On failure the previous list is
            kept, the error is recorded and Err is returned.
        """
        if not self.store.state.auth.is_authenticated:
            return Err(NOT_SIGNED_IN)

        seq = next(self._seq)
        self.store.dispatch(ConversationsRequested(seq=seq))
        try:
            conversations = await self.chat_api.get_conversations()
        except ApiError as e:
            failure = Failure.from_api_error(e, "Failed to fetch conversations")
            self.store.dispatch(ConversationsFailed(seq=seq, error=failure.message))
            return Err(failure)

        self.store.dispatch(ConversationsLoaded(seq=seq, conversations=conversations))
        logger.debug(f"Fetched {len(conversations)} conversation(s)")
        return Ok(conversations)

    async def create_conversation(self, participant_id: str, product_id: str | None = None) -> Result[Conversation]:
        """Start (or reopen) a conversation with another user."""
        if not self.store.state.auth.is_authenticated:
            return Err(NOT_SIGNED_IN)
        if not participant_id.strip():
            return Err(Failure.validation("A participant is required"))
        if participant_id == self.current_user_id:
            return Err(Failure.validation("You cannot start a conversation with yourself"))

        try:
            conversation = await self.chat_api.create_conversation(participant_id, product_id)
        except ApiError as e:
            return self._fail(Failure.from_api_error(e, "Failed to create conversation"))

        self.store.dispatch(ConversationCreated(conversation=conversation))
        logger.info(f"Created conversation {conversation.id}")
        return Ok(conversation)

    async def delete_conversation(self, conversation_id: str) -> Result[None]:
        if not self.store.state.auth.is_authenticated:
            return Err(NOT_SIGNED_IN)
        try:
            await self.chat_api.delete_conversation(conversation_id)
        except ApiError as e:
            return self._fail(Failure.from_api_error(e, "Failed to delete conversation"))

        self.store.dispatch(ConversationDeleted(conversation_id=conversation_id))
        logger.info(f"Deleted conversation {conversation_id}")
        return Ok(None)

    async def refresh_unread_total(self) -> Result[int]:
        """Fetch the server's total unread count."""
        if not self.store.state.auth.is_authenticated:
            return Err(NOT_SIGNED_IN)
        try:
            count = await self.chat_api.get_unread_count()
        except ApiError as e:
            return self._fail(Failure.from_api_error(e, "Failed to fetch unread count"))

        self.store.dispatch(UnreadTotalLoaded(count=count))
        return Ok(count)

    # =========================================================================
    # Open thread
    # =========================================================================

    def open_conversation(self, conversation_id: str) -> None:
        """Make a conversation the open thread. Switching discards held messages."""
        self.store.dispatch(ConversationOpened(conversation_id=conversation_id))

    def close_conversation(self) -> None:
        """Leave the open thread. In-flight results for it will be ignored."""
        self.store.dispatch(ConversationClosed())

    async def fetch_messages(self, conversation_id: str) -> Result[tuple[Message, ...]]:
        """Load a conversation's messages, replacing the held list.

        Opens the conversation first if another one is open. The result is
        applied only if this is still the newest fetch for the open
        conversation when the response arrives.

        Returns:
            Ok(messages) from the server, even if the result was stale and
            not applied. Err on failure, with held messages left unchanged.
        """
        if not self.store.state.auth.is_authenticated:
            return Err(NOT_SIGNED_IN)

        self.open_conversation(conversation_id)
        seq = next(self._seq)
        self.store.dispatch(MessagesRequested(conversation_id=conversation_id, seq=seq))
        try:
            page = await self.chat_api.get_messages(conversation_id)
        except ApiError as e:
            failure = Failure.from_api_error(e, "Failed to fetch messages")
            self.store.dispatch(MessagesFailed(conversation_id=conversation_id, seq=seq, error=failure.message))
            return Err(failure)

        state = self.store.dispatch(MessagesLoaded(conversation_id=conversation_id, seq=seq, messages=page.messages))
        if state.chat.messages_request_seq != seq or state.chat.current_conversation_id != conversation_id:
            logger.debug(f"Dropped stale message fetch #{seq} for {conversation_id}")
        return Ok(page.messages)

    async def send_message(
        self,
        text: str,
        receiver_id: str,
        conversation_id: str | None = None,
        product_id: str | None = None,
    ) -> Result[Message]:
        """Send a text message and apply the server's copy.

        The confirmed message is appended to the open thread when it belongs
        to it, and becomes the conversation's last message. The sender's own
        unread count is never changed. Nothing is applied on failure.

        Args:
            text: Message body; must not be blank.
            receiver_id: The other participant.
            conversation_id: Existing conversation, or None to let the server pick/create one.
            product_id: Product the message is about.

        Returns:
            Ok(message) as confirmed by the server, or Err.
        """
        body = text.strip()
        if not body:
            return Err(Failure.validation("Message text cannot be empty"))
        if not receiver_id.strip():
            return Err(Failure.validation("A receiver is required"))
        if not self.store.state.auth.is_authenticated:
            return Err(NOT_SIGNED_IN)

        self.store.dispatch(SendStarted())
        try:
            sent = await self.chat_api.send_message(body, receiver_id, conversation_id, product_id)
        except ApiError as e:
            failure = Failure.from_api_error(e, "Failed to send message")
            self.store.dispatch(SendFailed(error=failure.message))
            return Err(failure)

        self.store.dispatch(SendSucceeded(conversation_id=sent.conversation_id, message=sent.message))
        logger.debug(f"Sent message {sent.message.id} in {sent.conversation_id}")
        return Ok(sent.message)

    async def mark_as_read(self, conversation_id: str) -> Result[None]:
        """Acknowledge every message of a conversation.

        On success the conversation's unread count drops to zero and, if it
        is the open thread, all held messages are flagged read.
        """
        if not self.store.state.auth.is_authenticated:
            return Err(NOT_SIGNED_IN)

        self.store.dispatch(MarkReadStarted(conversation_id=conversation_id))
        try:
            await self.chat_api.mark_as_read(conversation_id)
        except ApiError as e:
            failure = Failure.from_api_error(e, "Failed to mark conversation as read")
            self.store.dispatch(MarkReadFailed(conversation_id=conversation_id, error=failure.message))
            return Err(failure)

        self.store.dispatch(MarkReadSucceeded(conversation_id=conversation_id))
        return Ok(None)

    async def update_message(self, message_id: str, text: str) -> Result[Message]:
        body = text.strip()
        if not body:
            return Err(Failure.validation("Message text cannot be empty"))
        if not self.store.state.auth.is_authenticated:
            return Err(NOT_SIGNED_IN)
        try:
            message = await self.chat_api.update_message(message_id, body)
        except ApiError as e:
            return self._fail(Failure.from_api_error(e, "Failed to update message"))

        self.store.dispatch(MessageUpdated(message=message))
        return Ok(message)

    async def delete_message(self, message_id: str) -> Result[None]:
        if not self.store.state.auth.is_authenticated:
            return Err(NOT_SIGNED_IN)
        try:
            await self.chat_api.delete_message(message_id)
        except ApiError as e:
            return self._fail(Failure.from_api_error(e, "Failed to delete message"))

        self.store.dispatch(MessageDeleted(message_id=message_id))
        return Ok(None)

    def receive_messages(self, conversation_id: str, messages: Sequence[Message]) -> None:
        """Apply messages obtained by polling outside a full fetch.

        Messages addressed to the current user raise the unread count of a
        conversation that is not open; messages for the open thread are
        appended.
        """
        for message in messages:
            self.store.dispatch(
                MessageReceived(
                    conversation_id=conversation_id,
                    message=message,
                    current_user_id=self.current_user_id,
                )
            )

    def clear_error(self) -> None:
        self.store.dispatch(ChatErrorCleared())

    def _fail(self, failure: Failure) -> Err:
        self.store.dispatch(ChatFailed(error=failure.message))
        return Err(failure)

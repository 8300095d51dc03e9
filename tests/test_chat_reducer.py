"""Tests for the chat slice reducer."""

from datetime import UTC, datetime, timedelta

from marketchat.model.chat import Conversation, Message
from marketchat.model.user import User
from marketchat.state.auth import AuthSucceeded, SessionCleared
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
    ThreadStatus,
    UnreadTotalLoaded,
    reduce_chat,
)

T0 = datetime(2026, 3, 1, 10, 0, tzinfo=UTC)


def make_message(id: str, sender: str = "u2", receiver: str = "u1", minutes: int = 0, is_read: bool = False) -> Message:
    return Message(
        id=id,
        text=f"message {id}",
        sender_id=sender,
        receiver_id=receiver,
        timestamp=T0 + timedelta(minutes=minutes),
        is_read=is_read,
    )


def make_conversation(id: str = "c1", unread: int = 0, other: str = "u2") -> Conversation:
    return Conversation(id=id, participants=("u1", other), updated_at=T0, unread_count=unread)


def open_thread(state: ChatState, conversation_id: str, seq: int, messages: tuple[Message, ...]) -> ChatState:
    state = reduce_chat(state, ConversationOpened(conversation_id=conversation_id))
    state = reduce_chat(state, MessagesRequested(conversation_id=conversation_id, seq=seq))
    return reduce_chat(state, MessagesLoaded(conversation_id=conversation_id, seq=seq, messages=messages))


class TestConversationList:
    """Fetching the conversation list."""

    def test_loaded_replaces_list(self):
        state = ChatState(conversations=(make_conversation("old"),))
        state = reduce_chat(state, ConversationsRequested(seq=1))
        assert state.conversations_loading is True

        state = reduce_chat(state, ConversationsLoaded(seq=1, conversations=(make_conversation("c1"),)))

        assert [c.id for c in state.conversations] == ["c1"]
        assert state.conversations_loading is False

    def test_failure_keeps_previous_list(self):
        cached = (make_conversation("c1"),)
        state = reduce_chat(ChatState(conversations=cached), ConversationsRequested(seq=1))

        state = reduce_chat(state, ConversationsFailed(seq=1, error="Network error"))

        assert state.conversations == cached
        assert state.error == "Network error"
        assert state.conversations_loading is False

    def test_stale_list_response_is_dropped(self):
        """Only the newest list fetch is applied."""
        state = reduce_chat(ChatState(), ConversationsRequested(seq=1))
        state = reduce_chat(state, ConversationsRequested(seq=2))
        state = reduce_chat(state, ConversationsLoaded(seq=2, conversations=(make_conversation("new"),)))

        after_stale = reduce_chat(state, ConversationsLoaded(seq=1, conversations=(make_conversation("old"),)))

        assert after_stale is state


class TestThread:
    """Open thread loading and the thread status."""

    def test_status_progression(self):
        state = ChatState()
        assert state.thread_status == ThreadStatus.IDLE

        state = reduce_chat(state, ConversationOpened(conversation_id="c1"))
        assert state.thread_status == ThreadStatus.IDLE

        state = reduce_chat(state, MessagesRequested(conversation_id="c1", seq=1))
        assert state.thread_status == ThreadStatus.LOADING

        state = reduce_chat(state, MessagesLoaded(conversation_id="c1", seq=1, messages=(make_message("m1"),)))
        assert state.thread_status == ThreadStatus.LOADED

        state = reduce_chat(state, SendStarted())
        assert state.thread_status == ThreadStatus.SENDING

        state = reduce_chat(state, SendFailed(error="boom"))
        assert state.thread_status == ThreadStatus.LOADED

    def test_switching_conversation_discards_messages(self):
        state = open_thread(ChatState(), "c1", 1, (make_message("m1"),))

        state = reduce_chat(state, ConversationOpened(conversation_id="c2"))

        assert state.current_conversation_id == "c2"
        assert state.messages == ()
        assert state.messages_loaded is False

    def test_reopening_same_conversation_keeps_messages(self):
        state = open_thread(ChatState(), "c1", 1, (make_message("m1"),))

        assert reduce_chat(state, ConversationOpened(conversation_id="c1")) is state

    def test_result_for_closed_conversation_is_ignored(self):
        """Navigating away makes the in-flight fetch stale."""
        state = reduce_chat(ChatState(), ConversationOpened(conversation_id="c1"))
        state = reduce_chat(state, MessagesRequested(conversation_id="c1", seq=1))
        state = reduce_chat(state, ConversationClosed())

        after = reduce_chat(state, MessagesLoaded(conversation_id="c1", seq=1, messages=(make_message("m1"),)))

        assert after.messages == ()
        assert after.current_conversation_id is None

    def test_older_fetch_for_same_conversation_is_ignored(self):
        state = reduce_chat(ChatState(), ConversationOpened(conversation_id="c1"))
        state = reduce_chat(state, MessagesRequested(conversation_id="c1", seq=1))
        state = reduce_chat(state, MessagesRequested(conversation_id="c1", seq=2))
        state = reduce_chat(state, MessagesLoaded(conversation_id="c1", seq=2, messages=(make_message("new"),)))

        after = reduce_chat(state, MessagesLoaded(conversation_id="c1", seq=1, messages=(make_message("old"),)))

        assert [m.id for m in after.messages] == ["new"]

    def test_failed_fetch_keeps_messages_and_sets_error(self):
        state = open_thread(ChatState(), "c1", 1, (make_message("m1"),))
        state = reduce_chat(state, MessagesRequested(conversation_id="c1", seq=2))

        state = reduce_chat(state, MessagesFailed(conversation_id="c1", seq=2, error="Network error"))

        assert [m.id for m in state.messages] == ["m1"]
        assert state.error == "Network error"
        assert state.messages_loading is False

    def test_send_confirmed_during_fetch_is_carried_over(self):
        """A message confirmed while a refetch is in flight is not lost."""
        state = open_thread(ChatState(conversations=(make_conversation(),)), "c1", 1, (make_message("m1"),))
        state = reduce_chat(state, MessagesRequested(conversation_id="c1", seq=2))
        state = reduce_chat(state, SendStarted())
        sent = make_message("m2", sender="u1", receiver="u2", minutes=5)
        state = reduce_chat(state, SendSucceeded(conversation_id="c1", message=sent))

        state = reduce_chat(state, MessagesLoaded(conversation_id="c1", seq=2, messages=(make_message("m1"),)))

        assert [m.id for m in state.messages] == ["m1", "m2"]

    def test_carried_message_not_duplicated_when_fetched(self):
        state = open_thread(ChatState(conversations=(make_conversation(),)), "c1", 1, ())
        state = reduce_chat(state, MessagesRequested(conversation_id="c1", seq=2))
        sent = make_message("m2", sender="u1", receiver="u2")
        state = reduce_chat(state, SendSucceeded(conversation_id="c1", message=sent))

        state = reduce_chat(state, MessagesLoaded(conversation_id="c1", seq=2, messages=(sent,)))

        assert [m.id for m in state.messages] == ["m2"]


class TestSend:
    """Applying confirmed sends."""

    def test_send_updates_last_message_not_unread(self):
        state = open_thread(ChatState(conversations=(make_conversation(unread=3),)), "c1", 1, ())
        sent = make_message("m9", sender="u1", receiver="u2", minutes=30)

        state = reduce_chat(reduce_chat(state, SendStarted()), SendSucceeded(conversation_id="c1", message=sent))

        conversation = state.find_conversation("c1")
        assert conversation.unread_count == 3
        assert conversation.last_message == sent
        assert conversation.updated_at == sent.timestamp
        assert state.messages[-1] == sent
        assert state.sends_in_flight == 0

    def test_send_to_other_conversation_does_not_touch_thread(self):
        """A message for a conversation that is not open only updates the list."""
        conversations = (make_conversation("c1"), make_conversation("c2", other="u3"))
        state = open_thread(ChatState(conversations=conversations), "c1", 1, (make_message("m1"),))
        sent = make_message("m5", sender="u1", receiver="u3")

        state = reduce_chat(state, SendSucceeded(conversation_id="c2", message=sent))

        assert [m.id for m in state.messages] == ["m1"]
        assert state.find_conversation("c2").last_message == sent

    def test_send_failure_appends_nothing(self):
        state = open_thread(ChatState(conversations=(make_conversation(),)), "c1", 1, (make_message("m1"),))

        state = reduce_chat(reduce_chat(state, SendStarted()), SendFailed(error="Failed to send message"))

        assert [m.id for m in state.messages] == ["m1"]
        assert state.error == "Failed to send message"


class TestReadState:
    """Marking conversations as read."""

    def test_mark_read_open_conversation(self):
        messages = (make_message("m1"), make_message("m2", minutes=1))
        state = open_thread(ChatState(conversations=(make_conversation(unread=2),), unread_total=5), "c1", 1, messages)
        state = reduce_chat(state, MarkReadStarted(conversation_id="c1"))
        assert "c1" in state.marking_read

        state = reduce_chat(state, MarkReadSucceeded(conversation_id="c1"))

        assert state.find_conversation("c1").unread_count == 0
        assert all(m.is_read for m in state.messages)
        assert state.unread_total == 3
        assert state.marking_read == frozenset()

    def test_mark_read_other_conversation_leaves_thread(self):
        conversations = (make_conversation("c1"), make_conversation("c2", unread=4, other="u3"))
        state = open_thread(ChatState(conversations=conversations), "c1", 1, (make_message("m1"),))

        state = reduce_chat(state, MarkReadSucceeded(conversation_id="c2"))

        assert state.find_conversation("c2").unread_count == 0
        assert state.messages[0].is_read is False

    def test_mark_read_failure_keeps_counts(self):
        state = ChatState(conversations=(make_conversation(unread=2),))
        state = reduce_chat(state, MarkReadStarted(conversation_id="c1"))

        state = reduce_chat(state, MarkReadFailed(conversation_id="c1", error="Failed"))

        assert state.find_conversation("c1").unread_count == 2
        assert state.marking_read == frozenset()
        assert state.error == "Failed"


class TestReceive:
    """Messages pulled outside a full fetch."""

    def test_incoming_for_closed_conversation_increments_unread(self):
        state = ChatState(conversations=(make_conversation(unread=1),), unread_total=1)
        incoming = make_message("m7", minutes=10)

        state = reduce_chat(state, MessageReceived(conversation_id="c1", message=incoming, current_user_id="u1"))

        conversation = state.find_conversation("c1")
        assert conversation.unread_count == 2
        assert conversation.last_message == incoming
        assert state.unread_total == 2

    def test_incoming_for_open_conversation_appends(self):
        state = open_thread(ChatState(conversations=(make_conversation(),)), "c1", 1, ())
        incoming = make_message("m7")

        state = reduce_chat(state, MessageReceived(conversation_id="c1", message=incoming, current_user_id="u1"))

        assert state.messages == (incoming,)
        assert state.find_conversation("c1").unread_count == 0

    def test_own_message_never_counts_as_unread(self):
        state = ChatState(conversations=(make_conversation(unread=0),))
        own = make_message("m8", sender="u1", receiver="u2")

        state = reduce_chat(state, MessageReceived(conversation_id="c1", message=own, current_user_id="u1"))

        assert state.find_conversation("c1").unread_count == 0


class TestCollaboratorMutations:
    """Create, delete and update results."""

    def test_created_conversation_is_prepended(self):
        state = ChatState(conversations=(make_conversation("c1"),))

        state = reduce_chat(state, ConversationCreated(conversation=make_conversation("c2", other="u3")))

        assert [c.id for c in state.conversations] == ["c2", "c1"]

    def test_created_existing_conversation_is_replaced(self):
        state = ChatState(conversations=(make_conversation("c1"), make_conversation("c2", other="u3")))

        state = reduce_chat(state, ConversationCreated(conversation=make_conversation("c2", unread=1, other="u3")))

        assert [c.id for c in state.conversations] == ["c1", "c2"]
        assert state.find_conversation("c2").unread_count == 1

    def test_deleting_open_conversation_closes_thread(self):
        state = open_thread(ChatState(conversations=(make_conversation(),)), "c1", 1, (make_message("m1"),))

        state = reduce_chat(state, ConversationDeleted(conversation_id="c1"))

        assert state.conversations == ()
        assert state.current_conversation_id is None
        assert state.messages == ()

    def test_message_deleted(self):
        state = open_thread(ChatState(), "c1", 1, (make_message("m1"), make_message("m2")))

        state = reduce_chat(state, MessageDeleted(message_id="m1"))

        assert [m.id for m in state.messages] == ["m2"]

    def test_message_updated_in_thread_and_list(self):
        original = make_message("m1")
        conversation = make_conversation().with_last_message(original)
        state = open_thread(ChatState(conversations=(conversation,)), "c1", 1, (original,))
        edited = Message(
            id="m1",
            text="edited",
            sender_id=original.sender_id,
            receiver_id=original.receiver_id,
            timestamp=original.timestamp,
        )

        state = reduce_chat(state, MessageUpdated(message=edited))

        assert state.messages[0].text == "edited"
        assert state.find_conversation("c1").last_message.text == "edited"


class TestSessionBoundary:
    """The chat slice belongs to one identity."""

    def test_session_cleared_resets_slice(self):
        state = open_thread(ChatState(conversations=(make_conversation(),)), "c1", 1, (make_message("m1"),))

        assert reduce_chat(state, SessionCleared()) == ChatState()

    def test_new_login_resets_slice(self):
        state = ChatState(conversations=(make_conversation(),))
        user = User(id="u9", email="zoe@example.com", username="zoe", first_name="Zoe", last_name="Lee")

        assert reduce_chat(state, AuthSucceeded(token="tok", user=user)) == ChatState()


def test_unread_total_and_errors():
    state = reduce_chat(ChatState(), UnreadTotalLoaded(count=4))
    state = reduce_chat(state, ChatFailed(error="Failed to delete message"))

    assert state.unread_total == 4
    assert state.error == "Failed to delete message"
    assert reduce_chat(state, ChatErrorCleared()).error is None

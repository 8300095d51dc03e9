"""Application state: immutable slices, actions, pure reducers and the Store."""

from marketchat.state.auth import AuthState, AuthStatus, reduce_auth
from marketchat.state.chat import ChatState, ThreadStatus, reduce_chat
from marketchat.state.store import AppState, Store, reduce_app

__all__ = [
    "AppState",
    "AuthState",
    "AuthStatus",
    "ChatState",
    "Store",
    "ThreadStatus",
    "reduce_app",
    "reduce_auth",
    "reduce_chat",
]

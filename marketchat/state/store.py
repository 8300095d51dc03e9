"""Application state container.

``Store`` owns the single ``AppState`` value. ``dispatch`` is the only way
to change it: the action runs through the pure slice reducers and
subscribers are notified with the previous and next state. Everything runs
on one event loop, so dispatches are applied one at a time without locks.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from marketchat.state.auth import AuthState, reduce_auth
from marketchat.state.chat import ChatState, reduce_chat

logger = logging.getLogger(__name__)

Listener = Callable[["AppState", "AppState"], None]


@dataclass(frozen=True)
class AppState:
    """Root state: one field per slice."""

    auth: AuthState = field(default_factory=AuthState)
    chat: ChatState = field(default_factory=ChatState)


def reduce_app(state: AppState, action: object) -> AppState:
    """Run an action through every slice reducer.

    Returns:
        The same AppState object when no slice changed value.
    """
    auth = reduce_auth(state.auth, action)
    chat = reduce_chat(state.chat, action)
    if auth == state.auth and chat == state.chat:
        return state
    return AppState(auth=auth, chat=chat)


class Store:
    """Single-writer holder of the application state.

    Example:
        >>> store = Store()
        >>> unsubscribe = store.subscribe(lambda prev, curr: print(curr.auth.status))
        >>> store.dispatch(AuthCheckFinished())
        AuthStatus.UNAUTHENTICATED
    """

    def __init__(self, initial: AppState | None = None):
        self._state = initial or AppState()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> AppState:
        return self._state

    def dispatch(self, action: object) -> AppState:
        """Apply an action and notify subscribers if the state changed.

        Args:
            action: An action dataclass from marketchat.state.

        Returns:
            The new state.
        """
        previous = self._state
        self._state = reduce_app(previous, action)
        logger.debug(f"Dispatched {type(action).__name__}")

        if self._state is not previous:
            for listener in list(self._listeners):
                try:
                    listener(previous, self._state)
                except Exception as e:
                    logger.error(f"State listener failed on {type(action).__name__}: {e}", exc_info=True)
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called as ``listener(previous, current)``.

        Returns:
            A function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

"""Top-level client wiring the session manager and conversation store together."""

import logging
from typing import Any

import httpx

from marketchat.api.auth import AuthAPI
from marketchat.api.chat import ChatAPI
from marketchat.api.client import ApiClient
from marketchat.core.config import Config
from marketchat.runtime.chat import ConversationStore
from marketchat.runtime.session import SessionManager
from marketchat.state.auth import AuthStatus
from marketchat.state.store import Store
from marketchat.stores.credentials import CredentialStore, create_credential_store

logger = logging.getLogger(__name__)


class MarketChatClient:
    """Owns the application state store and every collaborator built on it.

    The session manager initializes first; the conversation store reads the
    current user from the same state. A 401 on any authenticated request
    ends the session through the session manager.

    Example:
        >>> async with MarketChatClient(load_config_or_default(None)) as client:
        ...     if not client.session.is_authenticated:
        ...         await client.session.login("ana@example.com", "hunter2")
        ...     await client.chat.fetch_conversations()
    """

    def __init__(
        self,
        config: Config,
        credentials: CredentialStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            config: Root configuration.
            credentials: Credential store; built from ``config.storage`` when omitted.
            transport: Optional httpx transport for the API client.
        """
        self.config = config
        self.store = Store()
        self.credentials = credentials or create_credential_store(config.storage)
        self.api = ApiClient(
            config.api,
            token_provider=lambda: self.store.state.auth.token,
            transport=transport,
        )
        self.session = SessionManager(self.store, AuthAPI(self.api), self.credentials)
        self.api.set_unauthorized_handler(self.session.handle_unauthorized)
        self.chat = ConversationStore(
            self.store,
            ChatAPI(self.api),
            sort_by_activity=config.chat.sort_conversations,
        )

    async def start(self) -> AuthStatus:
        """Resolve the stored session.

        Returns:
            The session status after checking stored credentials.
        """
        status = await self.session.check_auth_status()
        logger.info(f"MarketChat client started ({status.value})")
        return status

    async def stop(self) -> None:
        """Release the HTTP connection pool. Stored credentials are kept."""
        await self.api.aclose()
        logger.info("MarketChat client stopped")

    async def __aenter__(self) -> "MarketChatClient":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()

"""Integration tests for MarketChatClient over a mocked HTTP transport."""

import asyncio
import json

import httpx
import pytest

from marketchat.client import MarketChatClient
from marketchat.core.config import Config, StorageConfig
from marketchat.core.errors import ErrorKind
from marketchat.state.auth import AuthStatus
from marketchat.stores.credentials import TOKEN_KEY, USER_KEY, MemoryCredentialStore

USER = {"id": "u1", "email": "ana@example.com", "username": "ana", "firstName": "Ana", "lastName": "Silva"}
CONVERSATION = {
    "id": "c1",
    "participants": ["u1", "u2"],
    "unreadCount": 3,
    "updatedAt": "2026-03-01T10:00:00Z",
}


class FakeMarketplace:
    """Minimal in-process stand-in for the marketplace API."""

    def __init__(self, valid_token: str = "tok"):
        self.valid_token = valid_token
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api")

        if path == "/auth/login":
            return httpx.Response(200, json={"user": USER, "token": self.valid_token})
        if request.headers.get("Authorization") != f"Bearer {self.valid_token}":
            return httpx.Response(401, json={"message": "Token expired"})
        if path == "/auth/me":
            return httpx.Response(200, json=USER)
        if path == "/auth/logout":
            return httpx.Response(204)
        if path == "/chat/conversations":
            return httpx.Response(200, json={"conversations": [CONVERSATION]})
        if path == "/chat/messages":
            body = json.loads(request.content)
            message = {
                "id": "m100",
                "text": body["text"],
                "senderId": "u1",
                "receiverId": body["receiverId"],
                "timestamp": "2026-03-01T11:00:00Z",
            }
            return httpx.Response(201, json={"message": message, "conversationId": body.get("conversationId", "c1")})
        return httpx.Response(404, json={"message": "Not found"})


def make_client(server: FakeMarketplace, credentials: MemoryCredentialStore | None = None) -> MarketChatClient:
    config = Config(storage=StorageConfig(backend="memory"))
    return MarketChatClient(config, credentials=credentials, transport=httpx.MockTransport(server))


@pytest.mark.asyncio
async def test_start_without_credentials():
    server = FakeMarketplace()

    async with make_client(server) as client:
        assert client.session.state.status == AuthStatus.UNAUTHENTICATED
        assert client.session.is_loading is False

    assert server.requests == []


@pytest.mark.asyncio
async def test_start_restores_stored_session():
    server = FakeMarketplace()
    credentials = MemoryCredentialStore({TOKEN_KEY: "tok", USER_KEY: json.dumps({"id": "u1"})})

    async with make_client(server, credentials) as client:
        assert client.session.is_authenticated
        assert client.session.current_user.first_name == "Ana"


@pytest.mark.asyncio
async def test_login_then_chat_round_trip():
    """Login, list conversations and send a message through one client."""
    server = FakeMarketplace()

    async with make_client(server) as client:
        assert (await client.session.login("ana@example.com", "pw")).ok
        assert (await client.chat.fetch_conversations()).ok

        result = await client.chat.send_message("Still available?", "u2", conversation_id="c1")

        assert result.ok
        conversation = client.chat.state.find_conversation("c1")
        assert conversation.unread_count == 3
        assert conversation.last_message.text == "Still available?"
        assert server.requests[-1].headers["Authorization"] == "Bearer tok"


@pytest.mark.asyncio
async def test_expired_token_ends_session():
    """A 401 on an authenticated call purges credentials and signs out."""
    server = FakeMarketplace(valid_token="tok")
    credentials = MemoryCredentialStore()

    async with make_client(server, credentials) as client:
        await client.session.login("ana@example.com", "pw")
        await client.chat.fetch_conversations()
        server.valid_token = "rotated"

        result = await client.chat.fetch_conversations()

        assert result.failure.kind == ErrorKind.UNAUTHORIZED
        assert client.session.is_authenticated is False
        assert client.chat.state.conversations == ()
        assert await credentials.get(TOKEN_KEY) is None


@pytest.mark.asyncio
async def test_logout_clears_chat_state():
    server = FakeMarketplace()

    async with make_client(server) as client:
        await client.session.login("ana@example.com", "pw")
        await client.chat.fetch_conversations()

        await client.session.logout()

        assert client.chat.conversations == []
        assert client.session.current_user is None


class SlowMarketplace:
    """Marketplace whose conversation list stalls until released, then rejects the token it was sent."""

    def __init__(self, tokens: list[str]):
        self.tokens = iter(tokens)
        self.release = asyncio.Event()
        self.stalled = asyncio.Event()

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/api")
        if path == "/auth/login":
            return httpx.Response(200, json={"user": USER, "token": next(self.tokens)})
        if path == "/auth/refresh":
            return httpx.Response(200, json={"token": next(self.tokens)})
        if path == "/auth/logout":
            return httpx.Response(204)
        if path == "/chat/conversations":
            self.stalled.set()
            await self.release.wait()
            return httpx.Response(401, json={"message": "Token expired"})
        return httpx.Response(404, json={"message": "Not found"})


class TestLateRejection:
    """A 401 for a token the session no longer uses leaves the session alone."""

    @pytest.mark.asyncio
    async def test_relogin_while_request_in_flight(self):
        server = SlowMarketplace(["t1", "t2"])
        credentials = MemoryCredentialStore()
        config = Config(storage=StorageConfig(backend="memory"))

        async with MarketChatClient(config, credentials=credentials, transport=httpx.MockTransport(server)) as client:
            await client.session.login("ana@example.com", "pw")
            pending = asyncio.create_task(client.chat.fetch_conversations())
            await server.stalled.wait()

            await client.session.logout()
            await client.session.login("ana@example.com", "pw")
            server.release.set()
            result = await pending

            assert result.failure.kind == ErrorKind.UNAUTHORIZED
            assert client.session.is_authenticated
            assert client.session.state.token == "t2"
            assert await credentials.get(TOKEN_KEY) == "t2"

    @pytest.mark.asyncio
    async def test_refresh_while_request_in_flight(self):
        server = SlowMarketplace(["t1", "t2"])
        credentials = MemoryCredentialStore()
        config = Config(storage=StorageConfig(backend="memory"))

        async with MarketChatClient(config, credentials=credentials, transport=httpx.MockTransport(server)) as client:
            await client.session.login("ana@example.com", "pw")
            pending = asyncio.create_task(client.chat.fetch_conversations())
            await server.stalled.wait()

            assert (await client.session.refresh_token()).value == "t2"
            server.release.set()
            await pending

            assert client.session.is_authenticated
            assert await credentials.get(TOKEN_KEY) == "t2"

"""Remote REST API collaborators: transport, auth and chat endpoints."""

from marketchat.api.auth import AuthAPI
from marketchat.api.chat import ChatAPI, MessagePage, SentMessage
from marketchat.api.client import ApiClient, parse_response

__all__ = [
    "ApiClient",
    "AuthAPI",
    "ChatAPI",
    "MessagePage",
    "SentMessage",
    "parse_response",
]

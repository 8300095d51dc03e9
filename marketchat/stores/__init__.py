"""Persistence layer for MarketChat.

This package contains the credential stores used by the session manager:
- MemoryCredentialStore: process-local, for tests and ephemeral sessions
- FileCredentialStore: JSON file, optionally encrypted at rest
"""

from marketchat.stores.credentials import (
    TOKEN_KEY,
    USER_KEY,
    CredentialStore,
    FileCredentialStore,
    MemoryCredentialStore,
    create_credential_store,
)
from marketchat.stores.encryption import EncryptionService

__all__ = [
    "TOKEN_KEY",
    "USER_KEY",
    "CredentialStore",
    "FileCredentialStore",
    "MemoryCredentialStore",
    "create_credential_store",
    "EncryptionService",
]

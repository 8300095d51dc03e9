"""Persistent credential storage.

The session manager keeps two entries here, addressed by fixed keys: the
bearer token and a JSON snapshot of the signed-in user. Every operation is a
coroutine; file I/O runs in a worker thread so the event loop never blocks.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from threading import Lock

from marketchat.core.config.models import StorageConfig
from marketchat.core.errors import StorageError
from marketchat.stores.encryption import EncryptionService

logger = logging.getLogger(__name__)

TOKEN_KEY = "authToken"
USER_KEY = "userData"


class CredentialStore(ABC):
    """Key/value store for session credentials.

    Implementations raise StorageError when the backing medium cannot be
    read or written.
    """

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent."""
        ...

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""
        ...

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Delete a key. Missing keys are ignored."""
        ...

    @abstractmethod
    async def clear(self) -> None:
        """Delete every stored key."""
        ...


class MemoryCredentialStore(CredentialStore):
    """Process-local store; credentials do not survive a restart."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._values: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._values.get(key)

    async def set(self, key: str, value: str) -> None:
        self._values[key] = value

    async def remove(self, key: str) -> None:
        self._values.pop(key, None)

    async def clear(self) -> None:
        self._values.clear()


class FileCredentialStore(CredentialStore):
    """Stores credentials in a JSON file, optionally encrypted per value.

    Writes are atomic (tmp file + rename) and the file is created with
    owner-only permissions.

    Example:
        >>> store = FileCredentialStore(Path("~/.marketchat/credentials.json").expanduser())
        >>> await store.set("authToken", "abc123")
        >>> await store.get("authToken")
        'abc123'
    """

    def __init__(self, path: Path, encryption: EncryptionService | None = None):
        """Initialize the file store.

        Args:
            path: JSON file holding the credentials.
            encryption: Encrypts values at rest when provided.
        """
        self.path = Path(path)
        self._encryption = encryption
        self._lock = Lock()
        logger.debug(f"FileCredentialStore initialized: {self.path}")

    def _read_unlocked(self) -> dict[str, str]:
        """Load raw values from disk. Caller must hold self._lock."""
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupted credential file {self.path}: {e}") from e
        except OSError as e:
            raise StorageError(f"Cannot read credential file {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise StorageError(f"Invalid credential file format (expected object): {self.path}")
        return {str(k): str(v) for k, v in data.items()}

    def _write_unlocked(self, data: dict[str, str]) -> None:
        """Persist raw values atomically. Caller must hold self._lock."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(".tmp")
            with tmp_path.open("w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            tmp_path.chmod(0o600)
            tmp_path.replace(self.path)
        except OSError as e:
            raise StorageError(f"Cannot write credential file {self.path}: {e}") from e

    def _get_sync(self, key: str) -> str | None:
        with self._lock:
            raw = self._read_unlocked().get(key)
        if raw is None or self._encryption is None:
            return raw
        return self._encryption.decrypt(raw)

    def _set_sync(self, key: str, value: str) -> None:
        stored = self._encryption.encrypt(value) if self._encryption else value
        with self._lock:
            data = self._read_unlocked()
            data[key] = stored
            self._write_unlocked(data)

    def _remove_sync(self, key: str) -> None:
        with self._lock:
            data = self._read_unlocked()
            if key in data:
                del data[key]
                self._write_unlocked(data)

    def _clear_sync(self) -> None:
        with self._lock:
            try:
                self.path.unlink(missing_ok=True)
            except OSError as e:
                raise StorageError(f"Cannot delete credential file {self.path}: {e}") from e

    async def get(self, key: str) -> str | None:
        return await asyncio.to_thread(self._get_sync, key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._set_sync, key, value)

    async def remove(self, key: str) -> None:
        await asyncio.to_thread(self._remove_sync, key)

    async def clear(self) -> None:
        await asyncio.to_thread(self._clear_sync)


def create_credential_store(config: StorageConfig) -> CredentialStore:
    """Build the credential store described by the storage config.

    Args:
        config: Storage section of the root configuration.

    Returns:
        A MemoryCredentialStore or a FileCredentialStore.
    """
    if config.backend == "memory":
        return MemoryCredentialStore()
    encryption = EncryptionService(config.key_path) if config.encrypt else None
    return FileCredentialStore(config.path.expanduser(), encryption=encryption)

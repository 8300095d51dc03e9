"""Encryption of persisted credentials at rest."""

import logging
from pathlib import Path

from cryptography.fernet import Fernet, InvalidToken

from marketchat.core.errors import StorageError

logger = logging.getLogger(__name__)


class EncryptionService:
    """Fernet encryption keyed by a local key file.

    The key file is created on first use with owner-only permissions.
    """

    DEFAULT_KEY_FILE = ".marketchat_key"

    def __init__(self, key_path: Path | None = None):
        self.key_path = key_path or Path.home() / self.DEFAULT_KEY_FILE
        self._fernet = self._load_or_create_key()

    def _load_or_create_key(self) -> Fernet:
        """Load existing key or generate new one."""
        try:
            if self.key_path.exists():
                key = self.key_path.read_bytes()
            else:
                key = Fernet.generate_key()
                self.key_path.parent.mkdir(parents=True, exist_ok=True)
                self.key_path.write_bytes(key)
                self.key_path.chmod(0o600)
                logger.info(f"Created credential encryption key: {self.key_path}")
            return Fernet(key)
        except (OSError, ValueError) as e:
            raise StorageError(f"Cannot load encryption key {self.key_path}: {e}") from e

    def encrypt(self, plaintext: str) -> str:
        """Encrypt a string value."""
        return self._fernet.encrypt(plaintext.encode()).decode()

    def decrypt(self, ciphertext: str) -> str:
        """Decrypt a string value.

        Raises:
            StorageError: If the value was encrypted with a different key or is corrupted.
        """
        try:
            return self._fernet.decrypt(ciphertext.encode()).decode()
        except InvalidToken as e:
            raise StorageError("Stored value cannot be decrypted with the current key") from e

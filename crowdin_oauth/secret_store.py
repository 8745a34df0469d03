"""Secret storage backends for the Crowdin access token"""

import logging
import os
import platform
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from settings import KEYRING_SERVICE, KEYRING_USERNAME, TOKEN_FILE, TOKEN_STORAGE

logger = logging.getLogger(__name__)


class SecretStoreError(Exception):
    """Raised when the underlying secret storage cannot be accessed"""


class SecretStore(ABC):
    """Key-value store holding a single secret string"""

    @abstractmethod
    def load(self) -> Optional[str]:
        """Return the stored secret, or None if nothing is stored

        Raises:
            SecretStoreError: If the storage cannot be read
        """

    @abstractmethod
    def save(self, secret: str) -> None:
        """Persist the secret, replacing any previous value

        Raises:
            SecretStoreError: If the storage cannot be written
        """

    @abstractmethod
    def delete(self) -> None:
        """Remove the stored secret; a missing secret is not an error

        Raises:
            SecretStoreError: If the storage cannot be modified
        """


class KeyringSecretStore(SecretStore):
    """Secret kept in the OS keyring (Keychain, Credential Locker, Secret Service)"""

    def __init__(self, service: str = KEYRING_SERVICE, username: str = KEYRING_USERNAME):
        self.service = service
        self.username = username

    def load(self) -> Optional[str]:
        try:
            return keyring.get_password(self.service, self.username)
        except KeyringError as e:
            raise SecretStoreError(f"Cannot read {self.service} secret from keyring: {e}") from e

    def save(self, secret: str) -> None:
        try:
            keyring.set_password(self.service, self.username, secret)
        except KeyringError as e:
            raise SecretStoreError(f"Cannot write {self.service} secret to keyring: {e}") from e

    def delete(self) -> None:
        try:
            keyring.delete_password(self.service, self.username)
        except PasswordDeleteError:
            # Nothing stored
            pass
        except KeyringError as e:
            raise SecretStoreError(f"Cannot delete {self.service} secret from keyring: {e}") from e


class FileSecretStore(SecretStore):
    """Secret kept in a file readable only by the current user"""

    def __init__(self, token_file: Optional[str] = None):
        self.token_path = Path(token_file if token_file else TOKEN_FILE).expanduser()

    def _ensure_secure_directory(self):
        """Create parent directory with secure permissions"""
        parent_dir = self.token_path.parent
        if not parent_dir.exists():
            parent_dir.mkdir(parents=True, exist_ok=True)
            # Set directory permissions to 700 on Unix-like systems
            if platform.system() != "Windows":
                os.chmod(parent_dir, 0o700)

    def load(self) -> Optional[str]:
        if not self.token_path.exists():
            return None

        try:
            return self.token_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise SecretStoreError(f"Cannot read {self.token_path}: {e}") from e

    def save(self, secret: str) -> None:
        try:
            self._ensure_secure_directory()
            self.token_path.write_text(secret, encoding="utf-8")
            if platform.system() != "Windows":
                os.chmod(self.token_path, 0o600)
        except OSError as e:
            raise SecretStoreError(f"Cannot write {self.token_path}: {e}") from e

    def delete(self) -> None:
        try:
            self.token_path.unlink(missing_ok=True)
        except OSError as e:
            raise SecretStoreError(f"Cannot delete {self.token_path}: {e}") from e


def create_secret_store(backend: str = TOKEN_STORAGE) -> SecretStore:
    """Create the secret store selected by configuration

    Args:
        backend: "keyring" or "file"

    Raises:
        ValueError: If the backend name is unknown
    """
    backend = backend.lower()
    if backend == "keyring":
        return KeyringSecretStore()
    if backend == "file":
        return FileSecretStore()
    raise ValueError(f"Unknown token storage backend: {backend}")

"""Cached access token backed by a secret store"""

import json
import logging
import threading
from typing import Optional

from .models import AccessToken
from .secret_store import SecretStore, SecretStoreError

logger = logging.getLogger(__name__)


class TokenStore:
    """Persists and retrieves the single cached Crowdin access token

    The secret store is read at most once; afterwards the in-memory copy is
    authoritative. Reads that fail are treated exactly like "no token".
    """

    def __init__(self, secrets: SecretStore, lock: Optional[threading.RLock] = None):
        """Initialize token store

        Args:
            secrets: Secret storage collaborator
            lock: Lock shared with the OAuth handshake (creates new if None)
        """
        self.secrets = secrets
        self.lock = lock or threading.RLock()
        self._token: Optional[AccessToken] = None
        self._loaded = False

    def load(self) -> Optional[AccessToken]:
        """Get the cached token, reading the secret store on first use

        Returns:
            Stored token, or None if there is none or it cannot be read
        """
        with self.lock:
            if not self._loaded:
                self._token = self._read()
                self._loaded = True
            return self._token

    def save(self, token: AccessToken) -> None:
        """Cache the token and persist it to the secret store"""
        with self.lock:
            self._token = token
            self._loaded = True
            try:
                self.secrets.save(json.dumps(token.to_dict()))
                logger.debug("Saved Crowdin token to secret storage")
            except SecretStoreError as e:
                # The token stays usable for this session
                logger.error(f"Failed to persist Crowdin token: {e}")

    def clear(self) -> None:
        """Forget the token, both in memory and in the secret store"""
        with self.lock:
            self._token = None
            self._loaded = True
            try:
                self.secrets.delete()
                logger.info("Cleared Crowdin token")
            except SecretStoreError as e:
                logger.error(f"Failed to delete stored Crowdin token: {e}")

    def clear_if(self, token: AccessToken) -> bool:
        """Forget the token only if it is still the current one

        Used when a request issued with ``token`` was rejected; a newer token
        obtained in the meantime must survive.

        Returns:
            True if the token was cleared
        """
        with self.lock:
            if self.load() != token:
                return False
            self.clear()
            return True

    def drop_cache(self) -> None:
        """Release the in-memory copy without touching the secret store"""
        with self.lock:
            self._token = None
            self._loaded = False

    def _read(self) -> Optional[AccessToken]:
        try:
            secret = self.secrets.load()
        except SecretStoreError as e:
            logger.warning(f"Cannot read stored Crowdin token, treating as signed out: {e}")
            return None

        if not secret or not secret.strip():
            logger.debug("No stored Crowdin token")
            return None

        try:
            data = json.loads(secret)
        except json.JSONDecodeError:
            # Bare token string, as stored by older versions
            return AccessToken(access_token=secret.strip())

        if not isinstance(data, dict):
            logger.warning("Stored Crowdin token has unexpected format, ignoring it")
            return None

        try:
            return AccessToken.from_dict(data)
        except ValueError as e:
            logger.warning(f"Stored Crowdin token is corrupt, ignoring it: {e}")
            return None

"""Validation of the cached Crowdin token before API use"""

import asyncio
import logging

import httpx

from errors import AuthenticationRejected, SignInRequired
from settings import TOKEN_EXPIRY_MARGIN
from .models import AccessToken
from .token_exchange import refresh_access_token
from .token_store import TokenStore

logger = logging.getLogger(__name__)


class TokenValidator:
    """Produces a usable access token or signals that sign-in is required

    Validation is lazy: a stored token is trusted until Crowdin rejects it.
    The only proactive check is a known expiry, in which case the token is
    refreshed once if a refresh token is available.
    """

    def __init__(self, store: TokenStore, client: httpx.AsyncClient):
        """Initialize token validator

        Args:
            store: Token store holding the cached token
            client: HTTP client used for token refresh
        """
        self.store = store
        self.client = client
        self._refresh_lock = asyncio.Lock()

    async def get_valid_token(self) -> AccessToken:
        """Get a token suitable for an API request

        Returns:
            The cached token, or a freshly refreshed one if it had expired

        Raises:
            SignInRequired: If no token is stored or it expired and cannot be refreshed
            RemoteRequestFailed: If the refresh endpoint cannot be reached
        """
        token = self.store.load()
        if token is None:
            raise SignInRequired()

        if not token.is_expired(margin=TOKEN_EXPIRY_MARGIN):
            return token

        async with self._refresh_lock:
            # Another request may have refreshed while we waited
            current = self.store.load()
            if current is None:
                raise SignInRequired()
            if current != token and not current.is_expired(margin=TOKEN_EXPIRY_MARGIN):
                return current
            return await self._refresh(current)

    async def _refresh(self, token: AccessToken) -> AccessToken:
        if not token.refresh_token:
            logger.info("Crowdin token expired and no refresh token available")
            self.store.clear_if(token)
            raise SignInRequired("Crowdin sign-in expired")

        logger.info("Crowdin token expired, attempting refresh...")
        try:
            refreshed = await refresh_access_token(self.client, token)
        except AuthenticationRejected as e:
            logger.error(f"Failed to refresh Crowdin token: {e.reason}")
            self.store.clear_if(token)
            raise SignInRequired("Crowdin sign-in expired") from e

        with self.store.lock:
            # Sign-out or a new sign-in during the refresh wins
            current = self.store.load()
            if current is None:
                raise SignInRequired()
            if current != token:
                return current
            self.store.save(refreshed)
        return refreshed

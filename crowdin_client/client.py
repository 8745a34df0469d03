"""Client facade for the Crowdin platform"""

import asyncio
import logging
import os
import threading
import webbrowser
from typing import Callable, List, Optional, Union
from urllib.parse import urlencode

import httpx

from crowdin_api import ApiGateway, Language, ProjectInfo, ProjectListing, UserInfo
from crowdin_oauth import (
    HandshakeState,
    OAuthHandshake,
    SecretStore,
    TokenStore,
    TokenValidator,
    create_secret_store,
    is_oauth_callback,
)
from settings import (
    ATTRIBUTION_CAMPAIGN,
    ATTRIBUTION_SOURCE,
    CONNECT_TIMEOUT,
    CROWDIN_WEB_BASE,
    REQUEST_TIMEOUT,
)

logger = logging.getLogger(__name__)


class CrowdinClient:
    """Client to the Crowdin platform

    Owns the cached token, the pending OAuth handshake and the API gateway.
    Use it as an async context manager, or through ``get_client()`` and
    ``clean_up()`` for a process-wide instance.
    """

    def __init__(
        self,
        secrets: Optional[SecretStore] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        open_url: Callable[[str], bool] = webbrowser.open
    ):
        """Initialize the client

        Args:
            secrets: Secret storage for the token (configured backend if None)
            http_client: HTTP client to use; created and owned by the client if None
            open_url: Callable opening the authorization URL in a browser
        """
        # Guards the {token, pending handshake} pair
        self._lock = threading.RLock()

        self._owns_http_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(REQUEST_TIMEOUT, connect=CONNECT_TIMEOUT),
            follow_redirects=True,
        )

        self._store = TokenStore(secrets or create_secret_store(), lock=self._lock)
        self._validator = TokenValidator(self._store, self._http)
        self._handshake = OAuthHandshake(self._store, self._http, open_url=open_url, lock=self._lock)
        self._api: Optional[ApiGateway] = ApiGateway(self._validator, self._store, self._http)
        self._closed = False

    async def __aenter__(self) -> "CrowdinClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def handshake_state(self) -> HandshakeState:
        return self._handshake.state

    @property
    def authorize_url(self) -> Optional[str]:
        """URL opened for the pending authentication, if any"""
        return self._handshake.authorize_url

    def is_signed_in(self) -> bool:
        """Is the user currently signed into Crowdin?

        True if a token is stored; Crowdin may still reject it.
        """
        self._ensure_open()
        return self._store.load() is not None

    async def authenticate(self) -> None:
        """Authenticate with Crowdin

        Opens the browser to authorize the application. The application must
        route the redirect URI to ``handle_oauth_callback``. Concurrent calls
        join the same attempt.

        Raises:
            AuthenticationRejected: If the attempt fails or is cancelled
        """
        self._ensure_open()
        # Shielded so that one impatient caller does not cancel the others
        await asyncio.shield(self._handshake.authenticate())

    def handle_oauth_callback(self, uri: str) -> None:
        """Handle the OAuth redirect URI delivered by the OS"""
        self._ensure_open()
        self._handshake.handle_oauth_callback(uri)

    @staticmethod
    def is_oauth_callback(uri: str) -> bool:
        """Check whether ``uri`` is the Crowdin OAuth redirect"""
        return is_oauth_callback(uri)

    def sign_out(self) -> None:
        """Sign out of Crowdin, forget the token"""
        self._ensure_open()
        with self._lock:
            self._store.clear()
            self._handshake.cancel("signed out")
        logger.info("Signed out of Crowdin")

    async def get_user_info(self) -> UserInfo:
        """Retrieve information about the current user"""
        return await self._gateway().get_user_info()

    async def get_user_projects(self) -> List[ProjectListing]:
        """Retrieve listing of projects accessible to the user"""
        return await self._gateway().get_user_projects()

    async def get_project_info(self, project_id: int) -> ProjectInfo:
        """Retrieve detailed information about a project"""
        return await self._gateway().get_project_info(project_id)

    async def download_file(
        self,
        project_id: int,
        language: Language,
        file_id: int,
        file_extension: str,
        force_export_as_xliff: bool,
        output_file: Union[str, os.PathLike]
    ) -> None:
        """Download a specific Crowdin file into ``output_file``"""
        await self._gateway().download_file(
            project_id, language, file_id, file_extension, force_export_as_xliff, output_file
        )

    async def upload_file(
        self,
        project_id: int,
        language: Language,
        file_id: int,
        file_extension: str,
        file_content: Union[bytes, str]
    ) -> None:
        """Upload translations of a specific Crowdin file"""
        await self._gateway().upload_file(project_id, language, file_id, file_extension, file_content)

    @staticmethod
    def attribute_link(page: str) -> str:
        """Wrap a relative Crowdin URL into an absolute URL with attribution"""
        if not page.startswith(("http://", "https://")):
            if not page.startswith("/"):
                page = "/" + page
            page = CROWDIN_WEB_BASE.rstrip("/") + page

        query = urlencode({
            "utm_source": ATTRIBUTION_SOURCE,
            "utm_medium": "referral",
            "utm_campaign": ATTRIBUTION_CAMPAIGN,
        })
        separator = "&" if "?" in page else "?"
        return f"{page}{separator}{query}"

    async def aclose(self) -> None:
        """Release the client; it cannot be used afterwards

        Cancels a pending authentication and drops the cached token (the
        stored token is kept for the next session). Requests still in flight
        complete but their results are discarded by their callers.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._handshake.cancel("client shut down")
            self._store.drop_cache()
            self._api = None

        if self._owns_http_client:
            await self._http.aclose()

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("CrowdinClient has been cleaned up")

    def _gateway(self) -> ApiGateway:
        with self._lock:
            self._ensure_open()
            return self._api


_instance: Optional[CrowdinClient] = None
_instance_lock = threading.Lock()


def get_client() -> CrowdinClient:
    """Return the process-wide client, creating it on first use"""
    global _instance
    with _instance_lock:
        if _instance is None:
            _instance = CrowdinClient()
        return _instance


async def clean_up() -> None:
    """Destroy the process-wide client; call only on application shutdown"""
    global _instance
    with _instance_lock:
        instance, _instance = _instance, None
    if instance is not None:
        await instance.aclose()

"""Browser-redirect OAuth handshake with Crowdin"""

import asyncio
import logging
import secrets
import threading
import webbrowser
from enum import Enum
from typing import Callable, Optional, Set

import httpx

from errors import AuthenticationRejected, RemoteRequestFailed
from .authorization import build_authorize_url, create_state, is_oauth_callback, parse_callback
from .token_exchange import exchange_code_for_token
from .token_store import TokenStore

logger = logging.getLogger(__name__)


class HandshakeState(Enum):
    IDLE = "idle"
    AWAITING_CALLBACK = "awaiting_callback"
    EXCHANGING = "exchanging"


def _running_on(loop: asyncio.AbstractEventLoop) -> bool:
    try:
        return asyncio.get_running_loop() is loop
    except RuntimeError:
        return False


class PendingAuthentication:
    """A single authentication attempt and its outcome slot

    The outcome future belongs to the event loop that started the attempt;
    ``settle`` may be called from any thread and takes effect only once.
    """

    def __init__(self, state: str, url: str, loop: asyncio.AbstractEventLoop):
        self.state = state
        self.url = url
        self.loop = loop
        self.future: asyncio.Future = loop.create_future()
        self.exchanging = False
        self._settled = False

    def settle(self, error: Optional[BaseException] = None) -> bool:
        """Resolve the attempt with success, or with ``error``

        Returns:
            False if the attempt had already been resolved
        """
        if self._settled:
            return False
        self._settled = True

        if _running_on(self.loop):
            self._apply(error)
        elif not self.loop.is_closed():
            self.loop.call_soon_threadsafe(self._apply, error)
        return True

    def _apply(self, error: Optional[BaseException]) -> None:
        # Every awaiting caller may have given up already
        if self.future.done():
            return
        if error is None:
            self.future.set_result(None)
        else:
            self.future.set_exception(error)


class OAuthHandshake:
    """Drives the Crowdin OAuth flow through the user's browser

    At most one attempt is pending at a time. The OS delivers the redirect
    to the application, which passes it to ``handle_oauth_callback``; the
    callback is accepted only if it echoes the state value generated for
    the pending attempt.
    """

    def __init__(
        self,
        store: TokenStore,
        client: httpx.AsyncClient,
        open_url: Callable[[str], bool] = webbrowser.open,
        lock: Optional[threading.RLock] = None
    ):
        """Initialize OAuth handshake

        Args:
            store: Token store receiving the exchanged token
            client: HTTP client used for the code exchange
            open_url: Callable opening a URL in the browser, returns success
            lock: Lock guarding handshake and token state (defaults to the store's)
        """
        self.store = store
        self.client = client
        self.open_url = open_url
        self.lock = lock or store.lock
        self._pending: Optional[PendingAuthentication] = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def state(self) -> HandshakeState:
        with self.lock:
            if self._pending is None:
                return HandshakeState.IDLE
            if self._pending.exchanging:
                return HandshakeState.EXCHANGING
            return HandshakeState.AWAITING_CALLBACK

    @property
    def authorize_url(self) -> Optional[str]:
        """Authorization URL of the pending attempt, if any"""
        with self.lock:
            return self._pending.url if self._pending else None

    def authenticate(self) -> asyncio.Future:
        """Start authentication, or join the attempt already in progress

        Must be called from a running event loop.

        Returns:
            Future resolved when the attempt completes; fails with
            AuthenticationRejected if the attempt is rejected or cancelled
        """
        loop = asyncio.get_running_loop()

        with self.lock:
            if self._pending is not None:
                logger.debug("Crowdin authentication already in progress, joining it")
                return self._pending.future

            state = create_state()
            pending = PendingAuthentication(state, build_authorize_url(state), loop)
            self._pending = pending

        logger.info("Opening browser for Crowdin authentication")
        try:
            opened = self.open_url(pending.url)
        except webbrowser.Error as e:
            logger.debug(f"Browser launch failed: {e}")
            opened = False

        if not opened:
            logger.warning(f"Could not open browser automatically, please open this URL manually: {pending.url}")

        return pending.future

    def is_oauth_callback(self, uri: str) -> bool:
        """Check whether ``uri`` is this application's OAuth redirect"""
        return is_oauth_callback(uri)

    def handle_oauth_callback(self, uri: str) -> None:
        """Consume the OAuth redirect delivered by the OS

        Callbacks that arrive while no attempt awaits one, or while its code
        is already being exchanged, are ignored. Safe to call from any thread.
        """
        if not is_oauth_callback(uri):
            logger.warning("Ignoring URI that is not a Crowdin OAuth callback")
            return

        result = parse_callback(uri)

        with self.lock:
            pending = self._pending
            if pending is None or pending.exchanging:
                logger.debug("Ignoring OAuth callback, no authentication is awaiting one")
                return

            if result.error:
                reason = result.error_description or result.error
                logger.warning(f"Crowdin authorization denied: {reason}")
                self._fail(pending, AuthenticationRejected(reason))
                return

            if not result.state or not secrets.compare_digest(
                result.state.encode("utf-8"), pending.state.encode("utf-8")
            ):
                logger.warning("OAuth callback state does not match pending authentication, rejecting it")
                self._fail(pending, AuthenticationRejected("state mismatch in OAuth callback"))
                return

            if not result.code:
                self._fail(pending, AuthenticationRejected("OAuth callback carried no authorization code"))
                return

            pending.exchanging = True

        if _running_on(pending.loop):
            self._start_exchange(pending, result.code)
            return

        try:
            pending.loop.call_soon_threadsafe(self._start_exchange, pending, result.code)
        except RuntimeError as e:
            # Owning loop is closed; nobody can await this attempt any more
            logger.error(f"Cannot exchange Crowdin authorization code: {e}")
            with self.lock:
                if self._pending is pending:
                    self._fail(pending, AuthenticationRejected("event loop closed"))

    def cancel(self, reason: str) -> None:
        """Fail the pending attempt, if any

        An exchange still in flight completes but its token is discarded.
        """
        with self.lock:
            pending = self._pending
            if pending is None:
                return
            logger.info(f"Cancelling pending Crowdin authentication: {reason}")
            self._fail(pending, AuthenticationRejected(reason))

    def _fail(self, pending: PendingAuthentication, error: AuthenticationRejected) -> None:
        # Caller holds the lock
        if self._pending is pending:
            self._pending = None
        pending.settle(error)

    def _start_exchange(self, pending: PendingAuthentication, code: str) -> None:
        task = pending.loop.create_task(self._exchange(pending, code))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _exchange(self, pending: PendingAuthentication, code: str) -> None:
        try:
            token = await exchange_code_for_token(self.client, code)
        except AuthenticationRejected as e:
            error = e
        except RemoteRequestFailed as e:
            error = AuthenticationRejected(e.message)
        else:
            with self.lock:
                if self._pending is not pending:
                    logger.info("Discarding Crowdin token from a cancelled authentication")
                    return
                self.store.save(token)
                self._pending = None
                pending.settle()
            logger.info("Signed in to Crowdin")
            return

        with self.lock:
            if self._pending is pending:
                self._fail(pending, error)

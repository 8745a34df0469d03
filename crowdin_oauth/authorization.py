"""
Crowdin OAuth authorization URL construction and callback URI parsing
"""
import secrets
from typing import NamedTuple, Optional
from urllib.parse import parse_qs, urlencode, urlsplit

from settings import (
    CROWDIN_AUTHORIZE_URL,
    CROWDIN_CLIENT_ID,
    CROWDIN_REDIRECT_URI,
    CROWDIN_SCOPE,
)


class CallbackResult(NamedTuple):
    """Parameters delivered with the OAuth redirect"""
    code: Optional[str]
    state: Optional[str]
    error: Optional[str]
    error_description: Optional[str]


def create_state() -> str:
    """
    Generate random state parameter for CSRF protection.

    Returns:
        str: 32-byte random state string
    """
    return secrets.token_urlsafe(32)


def build_authorize_url(state: str) -> str:
    """
    Build the URL the browser is sent to for authorizing the application.

    Args:
        state: Per-attempt state value echoed back in the callback

    Returns:
        Full authorization URL
    """
    params = {
        "response_type": "code",
        "client_id": CROWDIN_CLIENT_ID,
        "redirect_uri": CROWDIN_REDIRECT_URI,
        "scope": CROWDIN_SCOPE,
        "state": state,
    }
    return f"{CROWDIN_AUTHORIZE_URL}?{urlencode(params)}"


def _location(uri: str) -> tuple:
    parts = urlsplit(uri)
    return parts.scheme.lower(), parts.netloc.lower(), parts.path.rstrip("/")


def is_oauth_callback(uri: str, redirect_uri: str = CROWDIN_REDIRECT_URI) -> bool:
    """
    Check whether a URI is the OAuth redirect registered for this application.

    Only scheme, host and path are compared; the query is ignored.
    """
    if not uri:
        return False
    try:
        return _location(uri) == _location(redirect_uri)
    except ValueError:
        # Malformed authority, e.g. an unbalanced IPv6 bracket
        return False


def parse_callback(uri: str) -> CallbackResult:
    """
    Extract code, state and error parameters from a callback URI.

    Parameters are read from the query string, or from the fragment when
    the query is empty.
    """
    parts = urlsplit(uri)
    params = parse_qs(parts.query or parts.fragment)

    def first(name: str) -> Optional[str]:
        values = params.get(name)
        return values[0] if values else None

    return CallbackResult(
        code=first("code"),
        state=first("state"),
        error=first("error"),
        error_description=first("error_description"),
    )

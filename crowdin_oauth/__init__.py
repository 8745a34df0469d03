"""Crowdin OAuth authentication package

Token lifecycle (storage, validation, refresh) and the browser-redirect
OAuth handshake.
"""

from .models import AccessToken
from .secret_store import (
    SecretStore,
    SecretStoreError,
    KeyringSecretStore,
    FileSecretStore,
    create_secret_store,
)
from .token_store import TokenStore
from .token_validator import TokenValidator
from .authorization import (
    CallbackResult,
    build_authorize_url,
    create_state,
    is_oauth_callback,
    parse_callback,
)
from .token_exchange import exchange_code_for_token, refresh_access_token
from .handshake import HandshakeState, OAuthHandshake, PendingAuthentication

__all__ = [
    # Models
    "AccessToken",
    # Storage
    "SecretStore",
    "SecretStoreError",
    "KeyringSecretStore",
    "FileSecretStore",
    "create_secret_store",
    "TokenStore",
    "TokenValidator",
    # Authorization
    "CallbackResult",
    "build_authorize_url",
    "create_state",
    "is_oauth_callback",
    "parse_callback",
    # Token Exchange
    "exchange_code_for_token",
    "refresh_access_token",
    # Handshake
    "HandshakeState",
    "OAuthHandshake",
    "PendingAuthentication",
]

"""OAuth token exchange and refresh against the Crowdin accounts service"""

import logging
from typing import Any, Dict

import httpx

from errors import AuthenticationRejected, RemoteRequestFailed
from settings import (
    CROWDIN_CLIENT_ID,
    CROWDIN_CLIENT_SECRET,
    CROWDIN_REDIRECT_URI,
    CROWDIN_TOKEN_URL,
    REQUEST_TIMEOUT,
)
from .models import AccessToken

logger = logging.getLogger(__name__)


def _client_credentials() -> Dict[str, str]:
    credentials = {"client_id": CROWDIN_CLIENT_ID}
    # Desktop builds usually exchange through a proxy that holds the secret
    if CROWDIN_CLIENT_SECRET:
        credentials["client_secret"] = CROWDIN_CLIENT_SECRET
    return credentials


async def _request_token(
    client: httpx.AsyncClient,
    operation: str,
    data: Dict[str, Any]
) -> Dict[str, Any]:
    """POST a grant to the token endpoint and return the parsed body

    Raises:
        RemoteRequestFailed: If the token endpoint cannot be reached
        AuthenticationRejected: If Crowdin refuses the grant
    """
    logger.debug(f"Sending {operation} request to {CROWDIN_TOKEN_URL}")

    try:
        response = await client.post(
            CROWDIN_TOKEN_URL,
            data=data,
            headers={"Accept": "application/json"},
            timeout=REQUEST_TIMEOUT,
        )
    except httpx.RequestError as e:
        logger.error(f"{operation} request failed: {e}")
        raise RemoteRequestFailed(operation, None, str(e)) from e

    logger.debug(f"{operation} response status: {response.status_code}")

    if response.status_code != 200:
        reason = f"HTTP {response.status_code}"
        try:
            body = response.json()
            if isinstance(body, dict):
                detail = body.get("error_description") or body.get("message") or body.get("error")
                if detail:
                    reason = f"{reason}: {detail}"
        except ValueError:
            pass
        logger.error(f"{operation} rejected: {reason}")
        raise AuthenticationRejected(reason)

    try:
        payload = response.json()
    except ValueError as e:
        raise AuthenticationRejected(f"invalid {operation} response") from e

    if not isinstance(payload, dict):
        raise AuthenticationRejected(f"invalid {operation} response")
    return payload


async def exchange_code_for_token(client: httpx.AsyncClient, code: str) -> AccessToken:
    """
    Exchange authorization code for an access token.

    Args:
        client: HTTP client used for the request
        code: Authorization code from the OAuth callback

    Returns:
        AccessToken issued by Crowdin

    Raises:
        RemoteRequestFailed: If the token endpoint cannot be reached
        AuthenticationRejected: If Crowdin refuses the code
    """
    data = {
        "grant_type": "authorization_code",
        "code": code,
        "redirect_uri": CROWDIN_REDIRECT_URI,
        **_client_credentials(),
    }
    payload = await _request_token(client, "token exchange", data)

    try:
        token = AccessToken.from_token_response(payload)
    except ValueError as e:
        raise AuthenticationRejected(str(e)) from e

    logger.info("Successfully exchanged authorization code for Crowdin token")
    return token


async def refresh_access_token(client: httpx.AsyncClient, token: AccessToken) -> AccessToken:
    """
    Refresh an expired access token.

    Args:
        client: HTTP client used for the request
        token: Expired token carrying a refresh token

    Returns:
        New AccessToken; keeps the old refresh token if Crowdin does not rotate it

    Raises:
        RemoteRequestFailed: If the token endpoint cannot be reached
        AuthenticationRejected: If the token has no refresh token or Crowdin refuses it
    """
    if not token.refresh_token:
        raise AuthenticationRejected("no refresh token available")

    data = {
        "grant_type": "refresh_token",
        "refresh_token": token.refresh_token,
        **_client_credentials(),
    }
    payload = await _request_token(client, "token refresh", data)

    try:
        refreshed = AccessToken.from_token_response(payload, previous_refresh_token=token.refresh_token)
    except ValueError as e:
        raise AuthenticationRejected(str(e)) from e

    logger.info("Refreshed Crowdin access token")
    return refreshed

"""
JWT payload decoding for Crowdin access tokens
"""
import base64
import json
import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# Enterprise tokens name their organization in this claim
DOMAIN_CLAIM = "domain"


def decode_jwt(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode JWT token payload without verification.

    Crowdin is the authority on token validity, the payload is only read
    for routing (organization domain) and expiry hints.

    Args:
        token: JWT access token

    Returns:
        Decoded JWT payload as dictionary, or None if the token is not a JWT
    """
    parts = token.split(".")
    if len(parts) != 3:
        return None

    payload = parts[1]
    # JWT uses base64url without padding
    payload += "=" * (-len(payload) % 4)

    try:
        decoded = json.loads(base64.urlsafe_b64decode(payload).decode("utf-8"))
    except (ValueError, UnicodeDecodeError) as e:
        logger.debug(f"Access token payload is not decodable: {e}")
        return None

    return decoded if isinstance(decoded, dict) else None


def extract_domain(token: str) -> Optional[str]:
    """
    Extract the Crowdin Enterprise organization domain from a token.

    Args:
        token: OAuth access token

    Returns:
        Organization domain, or None for crowdin.com accounts
    """
    claims = decode_jwt(token) or {}
    domain = claims.get(DOMAIN_CLAIM)
    return domain if isinstance(domain, str) and domain else None


def extract_expiry(token: str) -> Optional[float]:
    """
    Extract the expiry ("exp" claim) from a token.

    Returns:
        Unix timestamp, or None if the token does not carry one
    """
    claims = decode_jwt(token) or {}
    exp = claims.get("exp")
    if isinstance(exp, (int, float)) and not isinstance(exp, bool):
        return float(exp)
    return None

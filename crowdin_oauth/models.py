"""Data models for Crowdin OAuth authentication"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .jwt_utils import extract_domain, extract_expiry


@dataclass(frozen=True)
class AccessToken:
    """OAuth credential used to authorize Crowdin API calls

    The secrets are excluded from repr() so that a token never ends up in
    logs or tracebacks by accident.

    Attributes:
        access_token: Bearer token sent with every API request
        refresh_token: Token for obtaining a new access token, if issued
        expires_at: Unix timestamp after which the token is no longer valid,
            or None when Crowdin did not say
    """
    access_token: str = field(repr=False)
    refresh_token: Optional[str] = field(default=None, repr=False)
    expires_at: Optional[float] = None

    @property
    def domain(self) -> Optional[str]:
        """Crowdin Enterprise organization the token belongs to, if any"""
        return extract_domain(self.access_token)

    @property
    def effective_expiry(self) -> Optional[float]:
        """Recorded expiry, falling back to the JWT "exp" claim"""
        if self.expires_at is not None:
            return self.expires_at
        return extract_expiry(self.access_token)

    def is_expired(self, margin: float = 0) -> bool:
        """Check whether the token is known to have expired

        A token without any expiry information is never considered expired;
        Crowdin reports it with HTTP 401 when it stops working.
        """
        expiry = self.effective_expiry
        if expiry is None:
            return False
        return time.time() >= expiry - margin

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage"""
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_at": self.expires_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AccessToken":
        """Load from dictionary

        Raises:
            ValueError: If the dictionary carries no access token
        """
        access_token = data.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise ValueError("Stored token has no access_token")

        expires_at = data.get("expires_at")
        if expires_at is not None:
            if isinstance(expires_at, bool) or not isinstance(expires_at, (int, float, str)):
                raise ValueError("Stored token has invalid expires_at")
            expires_at = float(expires_at)

        refresh_token = data.get("refresh_token") or None
        if refresh_token is not None and not isinstance(refresh_token, str):
            raise ValueError("Stored token has invalid refresh_token")

        return cls(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=expires_at,
        )

    @classmethod
    def from_token_response(
        cls,
        payload: Dict[str, Any],
        previous_refresh_token: Optional[str] = None
    ) -> "AccessToken":
        """Build a token from an OAuth token endpoint response

        Args:
            payload: Parsed JSON body of the token endpoint
            previous_refresh_token: Refresh token to keep if the response
                does not rotate it

        Raises:
            ValueError: If the response does not contain an access token
        """
        access_token = payload.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise ValueError("Token response missing access_token")

        expires_in = payload.get("expires_in")
        expires_at = None
        if isinstance(expires_in, (int, float)) and not isinstance(expires_in, bool):
            expires_at = time.time() + expires_in

        return cls(
            access_token=access_token,
            refresh_token=payload.get("refresh_token") or previous_refresh_token,
            expires_at=expires_at,
        )

"""Errors raised by the Crowdin client"""

from typing import Optional


class CrowdinError(Exception):
    """Base class for all Crowdin client errors"""


class SignInRequired(CrowdinError):
    """No usable access token is available; the user must authenticate"""

    def __init__(self, message: str = "Not signed in to Crowdin"):
        super().__init__(message)


class AuthenticationRejected(CrowdinError):
    """The OAuth handshake failed and no token was stored"""

    def __init__(self, reason: str):
        super().__init__(f"Crowdin authentication failed: {reason}")
        self.reason = reason


class RemoteAuthorizationExpired(CrowdinError):
    """Crowdin rejected the cached token; it has been forgotten"""

    def __init__(self, operation: str):
        super().__init__(f"Crowdin authorization expired during {operation}, please sign in again")
        self.operation = operation


class RemoteRequestFailed(CrowdinError):
    """A Crowdin request failed for a reason other than authorization

    Attributes:
        operation: Name of the client operation that issued the request
        status: HTTP status code, or None for transport-level failures
        message: Error message reported by Crowdin or the transport
    """

    def __init__(self, operation: str, status: Optional[int], message: str):
        if status is None:
            text = f"Crowdin request {operation} failed: {message}"
        else:
            text = f"Crowdin request {operation} failed (HTTP {status}): {message}"
        super().__init__(text)
        self.operation = operation
        self.status = status
        self.message = message

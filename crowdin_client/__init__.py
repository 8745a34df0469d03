"""Client to the Crowdin translation management platform"""

from .client import CrowdinClient, clean_up, get_client

__all__ = [
    "CrowdinClient",
    "clean_up",
    "get_client",
]

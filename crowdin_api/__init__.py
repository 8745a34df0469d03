"""Crowdin API v2 access for the signed-in user"""

from .models import FileInfo, Language, ProjectInfo, ProjectListing, UserInfo
from .gateway import ApiGateway, XLIFF_EXTENSIONS

__all__ = [
    "ApiGateway",
    "XLIFF_EXTENSIONS",
    "FileInfo",
    "Language",
    "ProjectInfo",
    "ProjectListing",
    "UserInfo",
]

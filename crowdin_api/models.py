"""Domain objects returned by the Crowdin API gateway"""

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class Language:
    """A locale, identified the way Crowdin identifies target languages

    Attributes:
        crowdin_id: Crowdin language id, e.g. "pt-BR" or "de"
    """
    crowdin_id: str

    @property
    def code(self) -> str:
        """POSIX-style language code, e.g. "pt_BR" """
        return self.crowdin_id.replace("-", "_")

    @classmethod
    def from_code(cls, code: str) -> "Language":
        """Create from a POSIX-style code such as "pt_BR" or "sr@latin" """
        base = code.split("@")[0].split(".")[0]
        return cls(base.replace("_", "-"))

    def __str__(self) -> str:
        return self.crowdin_id


@dataclass(frozen=True)
class UserInfo:
    """Information about the signed-in user"""
    name: str
    login: str
    avatar: str


@dataclass(frozen=True)
class ProjectListing:
    """Summary of a project accessible to the user"""
    id: int
    identifier: str
    name: str


@dataclass(frozen=True)
class FileInfo:
    """A source file in a Crowdin project

    Attributes:
        id: File id
        title: Display title, falls back to the file name
        file_name: Name of the file
        dir_id: Containing directory id, 0 if at the root
        dir_name: Containing directory name
        branch_id: Containing branch id, 0 if not in a branch
        branch_name: Containing branch name
        full_path: Path of the file within the project
    """
    id: int
    title: str
    file_name: str
    dir_id: int = 0
    dir_name: str = ""
    branch_id: int = 0
    branch_name: str = ""
    full_path: str = ""


@dataclass(frozen=True)
class ProjectInfo:
    """Detailed information about a project"""
    id: int
    name: str
    languages: List[Language] = field(default_factory=list)
    files: List[FileInfo] = field(default_factory=list)

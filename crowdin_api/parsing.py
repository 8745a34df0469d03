"""
Mapping of raw Crowdin API v2 payloads to domain objects.

Payloads are validated with pydantic wire models first; anything that does
not validate raises ``pydantic.ValidationError`` (a ``ValueError``).
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .models import FileInfo, Language, ProjectInfo, ProjectListing, UserInfo


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class CrowdinUser(_WireModel):
    """User resource"""
    id: int
    username: str
    full_name: Optional[str] = Field(default=None, alias="fullName")
    avatar_url: Optional[str] = Field(default=None, alias="avatarUrl")


class CrowdinProject(_WireModel):
    """Project resource"""
    id: int
    name: str
    identifier: str = ""
    target_language_ids: List[str] = Field(default_factory=list, alias="targetLanguageIds")


class CrowdinFile(_WireModel):
    """Source file resource"""
    id: int
    name: str
    title: Optional[str] = None
    path: Optional[str] = None
    directory_id: Optional[int] = Field(default=None, alias="directoryId")
    branch_id: Optional[int] = Field(default=None, alias="branchId")


class CrowdinDirectory(_WireModel):
    """Directory resource"""
    id: int
    name: str
    path: Optional[str] = None


class CrowdinBranch(_WireModel):
    """Branch resource"""
    id: int
    name: str


class CrowdinDownload(_WireModel):
    """Build download link"""
    url: str


class CrowdinStorage(_WireModel):
    """Uploaded storage object"""
    id: int


def unwrap(payload: Any) -> Dict[str, Any]:
    """Return the resource inside Crowdin's {"data": {...}} envelope"""
    if not isinstance(payload, dict) or not isinstance(payload.get("data"), dict):
        raise ValueError("Response has no data object")
    return payload["data"]


def unwrap_list(payload: Any) -> List[Dict[str, Any]]:
    """Return the resources of a {"data": [{"data": {...}}, ...]} list envelope"""
    if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
        raise ValueError("Response has no data list")
    return [unwrap(item) for item in payload["data"]]


def parse_user_info(payload: Any) -> UserInfo:
    user = CrowdinUser.model_validate(unwrap(payload))
    return UserInfo(
        name=user.full_name or user.username,
        login=user.username,
        avatar=user.avatar_url or "",
    )


def parse_project_listings(entries: List[Dict[str, Any]]) -> List[ProjectListing]:
    projects = [CrowdinProject.model_validate(entry) for entry in entries]
    return [
        ProjectListing(id=p.id, identifier=p.identifier, name=p.name)
        for p in projects
    ]


def parse_project_info(
    project_payload: Any,
    files: List[Dict[str, Any]],
    directories: List[Dict[str, Any]],
    branches: List[Dict[str, Any]]
) -> ProjectInfo:
    """Combine project, file, directory and branch listings

    Directory and branch names are resolved by id. A file's full path is the
    path reported by Crowdin or, failing that, its branch, directory and
    name joined.
    """
    project = CrowdinProject.model_validate(unwrap(project_payload))
    dirs = {d.id: d for d in (CrowdinDirectory.model_validate(e) for e in directories)}
    branch_names = {b.id: b.name for b in (CrowdinBranch.model_validate(e) for e in branches)}

    file_infos = []
    for raw in files:
        f = CrowdinFile.model_validate(raw)
        dir_id = f.directory_id or 0
        branch_id = f.branch_id or 0
        directory = dirs.get(dir_id)
        dir_name = directory.name if directory else ""
        branch_name = branch_names.get(branch_id, "")

        full_path = f.path
        if not full_path:
            dir_path = (directory.path or directory.name).strip("/") if directory else ""
            full_path = "/" + "/".join(p for p in (branch_name, dir_path, f.name) if p)

        file_infos.append(FileInfo(
            id=f.id,
            title=f.title or f.name,
            file_name=f.name,
            dir_id=dir_id,
            dir_name=dir_name,
            branch_id=branch_id,
            branch_name=branch_name,
            full_path=full_path,
        ))

    return ProjectInfo(
        id=project.id,
        name=project.name,
        languages=[Language(lang_id) for lang_id in project.target_language_ids],
        files=file_infos,
    )


def parse_download_url(payload: Any) -> str:
    return CrowdinDownload.model_validate(unwrap(payload)).url


def parse_storage_id(payload: Any) -> int:
    return CrowdinStorage.model_validate(unwrap(payload)).id


def parse_error_message(payload: Any) -> Optional[str]:
    """Extract a human-readable message from a Crowdin error body

    Handles both {"error": {"message": ...}} and the validation error shape
    {"errors": [{"error": {"key": ..., "errors": [{"message": ...}]}}]}.
    """
    if not isinstance(payload, dict):
        return None

    error = payload.get("error")
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return error["message"]

    messages = []
    items = payload.get("errors")
    for item in items if isinstance(items, list) else []:
        detail = item.get("error") if isinstance(item, dict) else None
        if not isinstance(detail, dict):
            continue
        key = detail.get("key")
        subs = detail.get("errors")
        for sub in subs if isinstance(subs, list) else []:
            if isinstance(sub, dict) and isinstance(sub.get("message"), str):
                messages.append(f"{key}: {sub['message']}" if key else sub["message"])

    return "; ".join(messages) or None

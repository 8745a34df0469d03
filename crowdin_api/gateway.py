"""Authenticated Crowdin API v2 operations"""

import asyncio
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union

import httpx

from crowdin_oauth import AccessToken, TokenStore, TokenValidator
from errors import RemoteAuthorizationExpired, RemoteRequestFailed
from settings import (
    CROWDIN_API_BASE,
    CROWDIN_ENTERPRISE_API_BASE,
    PAGE_SIZE,
    REQUEST_TIMEOUT,
    TRANSFER_TIMEOUT,
    USER_AGENT,
)
from utils.logging_utils import log_request, log_response
from .models import Language, ProjectInfo, ProjectListing, UserInfo
from .parsing import (
    parse_download_url,
    parse_error_message,
    parse_project_info,
    parse_project_listings,
    parse_storage_id,
    parse_user_info,
    unwrap_list,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Extensions Crowdin exports as XLIFF even when not forced
XLIFF_EXTENSIONS = {"xliff", "xlf"}


class ApiGateway:
    """Executes Crowdin API requests on behalf of the signed-in user

    Every operation obtains a valid token first and fails with
    SignInRequired before touching the network if there is none. A 401
    response forgets the token that was used and raises
    RemoteAuthorizationExpired; other failures raise RemoteRequestFailed.
    """

    def __init__(self, validator: TokenValidator, store: TokenStore, client: httpx.AsyncClient):
        """Initialize API gateway

        Args:
            validator: Source of valid access tokens
            store: Token store, cleared when Crowdin rejects a token
            client: HTTP client performing the requests
        """
        self.validator = validator
        self.store = store
        self.client = client

    @staticmethod
    def api_base(token: AccessToken) -> str:
        """API root for the account the token belongs to"""
        domain = token.domain
        if domain:
            return CROWDIN_ENTERPRISE_API_BASE.format(domain=domain)
        return CROWDIN_API_BASE

    async def get_user_info(self) -> UserInfo:
        """Retrieve information about the current user"""
        operation = "get_user_info"
        payload = await self._get_json(operation, "/user")
        return self._parse(operation, parse_user_info, payload)

    async def get_user_projects(self) -> List[ProjectListing]:
        """Retrieve listing of projects accessible to the user"""
        operation = "get_user_projects"
        entries = await self._get_all(operation, "/projects")
        return self._parse(operation, parse_project_listings, entries)

    async def get_project_info(self, project_id: int) -> ProjectInfo:
        """Retrieve project details including its languages and files"""
        operation = "get_project_info"
        base = f"/projects/{project_id}"
        project, files, directories, branches = await asyncio.gather(
            self._get_json(operation, base),
            self._get_all(operation, f"{base}/files"),
            self._get_all(operation, f"{base}/directories"),
            self._get_all(operation, f"{base}/branches"),
        )
        return self._parse(operation, parse_project_info, project, files, directories, branches)

    async def download_file(
        self,
        project_id: int,
        language: Language,
        file_id: int,
        file_extension: str,
        force_export_as_xliff: bool,
        output_file: Union[str, os.PathLike]
    ) -> None:
        """Download the translation of a Crowdin file into ``output_file``

        Format conversion is done by Crowdin: the export format is a build
        parameter. The file is only replaced once the transfer completed.
        """
        operation = "download_file"
        export_as_xliff = force_export_as_xliff or file_extension.lstrip(".").lower() in XLIFF_EXTENSIONS

        response = await self._send(
            operation,
            "POST",
            f"/projects/{project_id}/translations/builds/files/{file_id}",
            json={
                "targetLanguageId": language.crowdin_id,
                "exportAsXliff": export_as_xliff,
            },
        )
        url = self._parse(operation, parse_download_url, self._json(operation, response))

        output = Path(output_file)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{output.name}.", suffix=".part", dir=output.parent)
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as out:
                await self._stream_to(operation, url, out)
            os.replace(tmp_path, output)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

        logger.info(f"Downloaded Crowdin file {file_id} ({language}) to {output}")

    async def upload_file(
        self,
        project_id: int,
        language: Language,
        file_id: int,
        file_extension: str,
        file_content: Union[bytes, str]
    ) -> None:
        """Upload translations for a Crowdin file

        The content is first placed in Crowdin storage, then imported as
        translations of ``file_id`` into ``language``.
        """
        operation = "upload_file"
        if isinstance(file_content, str):
            file_content = file_content.encode("utf-8")

        response = await self._send(
            operation,
            "POST",
            "/storages",
            content=file_content,
            headers={
                "Content-Type": "application/octet-stream",
                "Crowdin-API-FileName": f"{file_id}.{file_extension.lstrip('.')}",
            },
            timeout=TRANSFER_TIMEOUT,
        )
        storage_id = self._parse(operation, parse_storage_id, self._json(operation, response))

        await self._send(
            operation,
            "POST",
            f"/projects/{project_id}/translations/{language.crowdin_id}",
            json={
                "storageId": storage_id,
                "fileId": file_id,
                "importEqSuggestions": True,
                "autoApproveImported": False,
            },
        )
        logger.info(f"Uploaded translations of Crowdin file {file_id} ({language})")

    async def _send(
        self,
        operation: str,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
        content: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: float = REQUEST_TIMEOUT
    ) -> httpx.Response:
        token = await self.validator.get_valid_token()

        url = f"{self.api_base(token)}{path}"
        request_headers = {
            "Authorization": f"Bearer {token.access_token}",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
            **(headers or {}),
        }
        log_request(operation, method, url, request_headers)

        started = time.monotonic()
        try:
            response = await self.client.request(
                method,
                url,
                params=params,
                json=json,
                content=content,
                headers=request_headers,
                timeout=timeout,
            )
        except httpx.RequestError as e:
            logger.error(f"[{operation}] request failed: {e}")
            raise RemoteRequestFailed(operation, None, str(e)) from e
        log_response(operation, response.status_code, (time.monotonic() - started) * 1000)

        if response.status_code == 401:
            if self.store.clear_if(token):
                logger.warning("Crowdin rejected the access token, signing out")
            raise RemoteAuthorizationExpired(operation)

        if response.status_code >= 400:
            raise RemoteRequestFailed(operation, response.status_code, self._error_message(response))

        return response

    async def _stream_to(self, operation: str, url: str, out) -> None:
        # Pre-signed URL on a storage host; the access token is not sent there
        try:
            async with self.client.stream(
                "GET",
                url,
                headers={"User-Agent": USER_AGENT},
                timeout=TRANSFER_TIMEOUT,
            ) as response:
                if response.status_code >= 400:
                    await response.aread()
                    raise RemoteRequestFailed(operation, response.status_code, self._error_message(response))
                async for chunk in response.aiter_bytes():
                    out.write(chunk)
        except httpx.RequestError as e:
            logger.error(f"[{operation}] transfer failed: {e}")
            raise RemoteRequestFailed(operation, None, str(e)) from e

    async def _get_json(self, operation: str, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        response = await self._send(operation, "GET", path, params=params)
        return self._json(operation, response)

    async def _get_all(self, operation: str, path: str) -> List[Dict[str, Any]]:
        """Collect every page of a list endpoint"""
        entries: List[Dict[str, Any]] = []
        offset = 0
        while True:
            payload = await self._get_json(operation, path, params={"limit": PAGE_SIZE, "offset": offset})
            page = self._parse(operation, unwrap_list, payload)
            entries.extend(page)
            if len(page) < PAGE_SIZE:
                return entries
            offset += PAGE_SIZE

    @staticmethod
    def _json(operation: str, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise RemoteRequestFailed(operation, response.status_code, "response is not valid JSON") from e

    @staticmethod
    def _parse(operation: str, parser: Callable[..., T], *payloads: Any) -> T:
        try:
            return parser(*payloads)
        except ValueError as e:
            logger.debug(f"[{operation}] unexpected response payload: {e}")
            raise RemoteRequestFailed(operation, None, "unexpected response from Crowdin") from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            message = parse_error_message(response.json())
        except ValueError:
            message = None
        return message or response.reason_phrase or "request failed"

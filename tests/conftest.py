"""
Shared fixtures for Crowdin client tests.
"""

import base64
import json
from typing import Callable, Dict, List, Optional, Tuple
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest

from crowdin_client import CrowdinClient
from crowdin_oauth import SecretStore, SecretStoreError

API_PREFIX = "/api/v2"
REDIRECT = "poedit://auth/crowdin/"


class MemorySecretStore(SecretStore):
    """Secret store kept in memory, counting accesses"""

    def __init__(self, secret: Optional[str] = None):
        self.secret = secret
        self.loads = 0
        self.fail_load = False
        self.fail_save = False

    def load(self) -> Optional[str]:
        self.loads += 1
        if self.fail_load:
            raise SecretStoreError("keychain locked")
        return self.secret

    def save(self, secret: str) -> None:
        if self.fail_save:
            raise SecretStoreError("keychain read-only")
        self.secret = secret

    def delete(self) -> None:
        self.secret = None


class FakeCrowdin:
    """Routes requests of an httpx MockTransport to canned responses

    Routes are keyed by (method, path). A route is either an httpx.Response
    or a callable taking the request and returning one.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], object] = {}
        self.requests: List[httpx.Request] = []

    def route(self, method: str, path: str, response) -> None:
        self.routes[(method, path)] = response

    def api(self, method: str, path: str, response) -> None:
        self.route(method, API_PREFIX + path, response)

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        if callable(route):
            return route(request)
        return route

    def http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


def make_jwt(claims: dict) -> str:
    """Unsigned JWT carrying ``claims``"""
    def segment(data: dict) -> str:
        raw = json.dumps(data).encode("utf-8")
        return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")

    return f"{segment({'alg': 'none'})}.{segment(claims)}.signature"


def stored(access_token: str, refresh_token: Optional[str] = None, expires_at: Optional[float] = None) -> str:
    """Secret store contents for a token"""
    return json.dumps({
        "access_token": access_token,
        "refresh_token": refresh_token,
        "expires_at": expires_at,
    })


def data(resource: dict) -> dict:
    return {"data": resource}


def data_list(resources: list) -> dict:
    return {"data": [{"data": r} for r in resources]}


def state_of(url: str) -> str:
    return parse_qs(urlsplit(url).query)["state"][0]


def callback(state: str, code: str = "auth-code") -> str:
    return f"{REDIRECT}?code={code}&state={state}"


@pytest.fixture
def secrets():
    return MemorySecretStore()


@pytest.fixture
def crowdin():
    return FakeCrowdin()


@pytest.fixture
def opened_urls():
    return []


@pytest.fixture
def make_client(secrets, crowdin, opened_urls) -> Callable[[], CrowdinClient]:
    """Factory for clients wired to the in-memory store and fake Crowdin"""
    def factory() -> CrowdinClient:
        def open_url(url: str) -> bool:
            opened_urls.append(url)
            return True

        return CrowdinClient(secrets=secrets, http_client=crowdin.http_client(), open_url=open_url)

    return factory

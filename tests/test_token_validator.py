"""
Tests for token validation and refresh.
"""

import asyncio
import json
import time
from urllib.parse import parse_qs

import httpx
import pytest

from crowdin_oauth import AccessToken, TokenStore, TokenValidator
from errors import RemoteRequestFailed, SignInRequired

from conftest import MemorySecretStore

TOKEN_PATH = "/oauth/token"


def expired(access_token: str = "old", refresh_token: str = "refresh-1") -> AccessToken:
    return AccessToken(access_token, refresh_token, time.time() - 10)


class TestTokenValidator:
    """Test producing usable tokens"""

    @pytest.mark.asyncio
    async def test_no_token(self, crowdin):
        """Test missing token requires sign-in without network use"""
        validator = TokenValidator(TokenStore(MemorySecretStore()), crowdin.http_client())

        with pytest.raises(SignInRequired):
            await validator.get_valid_token()
        assert crowdin.requests == []

    @pytest.mark.asyncio
    async def test_valid_token_returned_as_is(self, crowdin):
        """Test tokens without known expiry are trusted"""
        store = TokenStore(MemorySecretStore())
        store.save(AccessToken("tok"))
        validator = TokenValidator(store, crowdin.http_client())

        assert await validator.get_valid_token() == AccessToken("tok")
        assert crowdin.requests == []

    @pytest.mark.asyncio
    async def test_refresh_expired_token(self, crowdin):
        """Test an expired token is refreshed and persisted"""
        crowdin.route("POST", TOKEN_PATH, httpx.Response(200, json={
            "access_token": "new",
            "expires_in": 3600,
        }))
        secrets = MemorySecretStore()
        store = TokenStore(secrets)
        store.save(expired())
        validator = TokenValidator(store, crowdin.http_client())

        token = await validator.get_valid_token()

        assert token.access_token == "new"
        assert token.refresh_token == "refresh-1"
        assert json.loads(secrets.secret)["access_token"] == "new"

        form = parse_qs(crowdin.requests[0].content.decode())
        assert form["grant_type"] == ["refresh_token"]
        assert form["refresh_token"] == ["refresh-1"]
        assert form["client_id"] == ["poedit-desktop"]

    @pytest.mark.asyncio
    async def test_concurrent_callers_refresh_once(self, crowdin):
        """Test simultaneous requests share a single refresh"""
        crowdin.route("POST", TOKEN_PATH, httpx.Response(200, json={"access_token": "new", "expires_in": 3600}))
        store = TokenStore(MemorySecretStore())
        store.save(expired())
        validator = TokenValidator(store, crowdin.http_client())

        tokens = await asyncio.gather(*(validator.get_valid_token() for _ in range(3)))

        assert {t.access_token for t in tokens} == {"new"}
        assert len(crowdin.calls("POST", TOKEN_PATH)) == 1

    @pytest.mark.asyncio
    async def test_expired_without_refresh_token(self, crowdin):
        """Test expired token that cannot be refreshed is forgotten"""
        store = TokenStore(MemorySecretStore())
        store.save(expired(refresh_token=None))
        validator = TokenValidator(store, crowdin.http_client())

        with pytest.raises(SignInRequired):
            await validator.get_valid_token()
        assert store.load() is None
        assert crowdin.requests == []

    @pytest.mark.asyncio
    async def test_refresh_rejected(self, crowdin):
        """Test a refused refresh signs the user out"""
        crowdin.route("POST", TOKEN_PATH, httpx.Response(400, json={"error": "invalid_grant"}))
        store = TokenStore(MemorySecretStore())
        store.save(expired())
        validator = TokenValidator(store, crowdin.http_client())

        with pytest.raises(SignInRequired):
            await validator.get_valid_token()
        assert store.load() is None

    @pytest.mark.asyncio
    async def test_refresh_unreachable_keeps_token(self, crowdin):
        """Test transport failure during refresh keeps the token for a retry"""
        def unreachable(request):
            raise httpx.ConnectError("connection refused", request=request)

        crowdin.route("POST", TOKEN_PATH, unreachable)
        store = TokenStore(MemorySecretStore())
        store.save(expired())
        validator = TokenValidator(store, crowdin.http_client())

        with pytest.raises(RemoteRequestFailed) as exc_info:
            await validator.get_valid_token()
        assert exc_info.value.status is None
        assert store.load() is not None

    @pytest.mark.asyncio
    async def test_sign_out_during_refresh_wins(self, crowdin):
        """Test a refresh finishing after sign-out does not resurrect the token"""
        store = TokenStore(MemorySecretStore())

        def refresh(request):
            store.clear()
            return httpx.Response(200, json={"access_token": "new"})

        crowdin.route("POST", TOKEN_PATH, refresh)
        store.save(expired())
        validator = TokenValidator(store, crowdin.http_client())

        with pytest.raises(SignInRequired):
            await validator.get_valid_token()
        assert store.load() is None

"""
Tests for the Crowdin client facade.
"""

import asyncio

import httpx
import pytest

import crowdin_client.client as client_module
from crowdin_client import CrowdinClient, clean_up, get_client
from crowdin_oauth import HandshakeState
from errors import AuthenticationRejected

from conftest import callback, data, state_of, stored

TOKEN_PATH = "/oauth/token"


def grant(crowdin, access_token="fresh-token"):
    crowdin.route("POST", TOKEN_PATH, httpx.Response(200, json={
        "access_token": access_token,
        "token_type": "bearer",
        "expires_in": 7200,
        "refresh_token": "refresh",
    }))


async def start_authentication(client: CrowdinClient) -> asyncio.Task:
    task = asyncio.ensure_future(client.authenticate())
    # Let the task open the browser
    await asyncio.sleep(0)
    return task


class TestSignIn:
    """Test the sign-in flow end to end"""

    @pytest.mark.asyncio
    async def test_fresh_sign_in(self, make_client, secrets, crowdin, opened_urls):
        """Test authenticating in a fresh process stores the exchanged token"""
        grant(crowdin)
        crowdin.api("GET", "/user", httpx.Response(200, json=data({"id": 1, "username": "jdoe"})))

        async with make_client() as client:
            assert not client.is_signed_in()

            task = await start_authentication(client)
            assert client.handshake_state == HandshakeState.AWAITING_CALLBACK
            assert client.authorize_url == opened_urls[0]

            uri = callback(state_of(opened_urls[0]), code="abc")
            assert client.is_oauth_callback(uri)
            client.handle_oauth_callback(uri)
            await task

            assert client.is_signed_in()
            user = await client.get_user_info()

        assert user.login == "jdoe"
        assert crowdin.calls("GET", "/api/v2/user")[0].headers["Authorization"] == "Bearer fresh-token"
        assert "fresh-token" in secrets.secret

    @pytest.mark.asyncio
    async def test_wrong_state(self, make_client, secrets, crowdin, opened_urls):
        """Test a forged callback leaves the user signed out"""
        grant(crowdin)

        async with make_client() as client:
            task = await start_authentication(client)
            client.handle_oauth_callback(callback("WRONG", code="abc"))

            with pytest.raises(AuthenticationRejected):
                await task
            assert not client.is_signed_in()

        assert secrets.secret is None
        assert crowdin.requests == []

    @pytest.mark.asyncio
    async def test_concurrent_authenticate_calls(self, make_client, crowdin, opened_urls):
        """Test a second call joins the pending attempt"""
        grant(crowdin)

        async with make_client() as client:
            first = await start_authentication(client)
            second = await start_authentication(client)
            assert len(opened_urls) == 1

            client.handle_oauth_callback(callback(state_of(opened_urls[0])))
            await asyncio.gather(first, second)
            assert client.is_signed_in()

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_cancel_attempt(self, make_client, crowdin, opened_urls):
        """Test one caller giving up leaves the attempt for others"""
        grant(crowdin)

        async with make_client() as client:
            impatient = await start_authentication(client)
            patient = await start_authentication(client)
            impatient.cancel()
            await asyncio.sleep(0)

            assert client.handshake_state == HandshakeState.AWAITING_CALLBACK
            client.handle_oauth_callback(callback(state_of(opened_urls[0])))
            await patient
            assert client.is_signed_in()

    @pytest.mark.asyncio
    async def test_sign_out_cancels_pending_authentication(self, make_client, opened_urls):
        """Test signing out fails the pending attempt"""
        async with make_client() as client:
            task = await start_authentication(client)
            client.sign_out()

            with pytest.raises(AuthenticationRejected, match="signed out"):
                await task
            assert client.handshake_state == HandshakeState.IDLE

    @pytest.mark.asyncio
    async def test_sign_out(self, make_client, secrets):
        """Test signing out forgets the stored token"""
        secrets.secret = stored("tok")

        async with make_client() as client:
            assert client.is_signed_in()
            client.sign_out()
            assert not client.is_signed_in()

        assert secrets.secret is None


class TestShutdown:
    """Test client teardown"""

    @pytest.mark.asyncio
    async def test_close_cancels_authentication(self, make_client, secrets):
        """Test shutting down fails the pending attempt but keeps the stored token"""
        secrets.secret = stored("tok")
        client = make_client()
        assert client.is_signed_in()
        task = await start_authentication(client)

        await client.aclose()

        with pytest.raises(AuthenticationRejected, match="shut down"):
            await task
        assert client.closed
        assert secrets.secret == stored("tok")

    @pytest.mark.asyncio
    async def test_use_after_close(self, make_client):
        """Test a closed client refuses further use"""
        client = make_client()
        await client.aclose()
        await client.aclose()

        with pytest.raises(RuntimeError):
            client.is_signed_in()
        with pytest.raises(RuntimeError):
            await client.get_user_info()

    @pytest.mark.asyncio
    async def test_owned_http_client_closed(self, secrets):
        """Test a client created without an HTTP client closes its own"""
        client = CrowdinClient(secrets=secrets)
        http = client._http
        await client.aclose()
        assert http.is_closed


class TestProcessWideClient:
    """Test get_client and clean_up"""

    @pytest.mark.asyncio
    async def test_singleton(self, monkeypatch, secrets):
        """Test the same instance is returned until cleaned up"""
        monkeypatch.setattr(client_module, "create_secret_store", lambda: secrets)
        monkeypatch.setattr(client_module, "_instance", None)

        first = get_client()
        assert get_client() is first

        await clean_up()
        assert first.closed

        second = get_client()
        assert second is not first
        await clean_up()
        await clean_up()


class TestAttributeLink:
    """Test attribution of links to Crowdin pages"""

    def test_relative_page(self):
        """Test relative paths are made absolute"""
        assert CrowdinClient.attribute_link("project/poedit") == (
            "https://crowdin.com/project/poedit?utm_source=poedit.net&utm_medium=referral&utm_campaign=poedit"
        )
        assert CrowdinClient.attribute_link("/project/poedit").startswith("https://crowdin.com/project/poedit?")

    def test_existing_query(self):
        """Test parameters are appended to an existing query"""
        link = CrowdinClient.attribute_link("/translate/poedit/all/en-cs?filter=basic")
        assert link.startswith("https://crowdin.com/translate/poedit/all/en-cs?filter=basic&utm_source=")

    def test_absolute_url(self):
        """Test absolute URLs keep their host"""
        link = CrowdinClient.attribute_link("https://acme.crowdin.com/u/projects")
        assert link.startswith("https://acme.crowdin.com/u/projects?utm_source=poedit.net")

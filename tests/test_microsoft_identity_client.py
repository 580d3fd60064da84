from __future__ import annotations

from urllib.parse import parse_qs

import httpx
import pytest

from mailbridge.clients.microsoft_auth import AuthorizationError, MicrosoftIdentityClient
from mailbridge.core.config import MicrosoftAppSettings
from mailbridge.schemas.auth import TokenError, TokenGrant


def _settings() -> MicrosoftAppSettings:
    return MicrosoftAppSettings(APP_ID="client-abc", TENANT="contoso")


def _client(handler) -> MicrosoftIdentityClient:
    return MicrosoftIdentityClient(_settings(), transport=httpx.MockTransport(handler))


def _form(request: httpx.Request) -> dict[str, str]:
    return {key: values[0] for key, values in parse_qs(request.content.decode()).items()}


@pytest.mark.asyncio
async def test_start_device_flow_posts_client_and_scope() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "device_code": "dev-1",
                "user_code": "ABCD",
                "verification_uri": "https://microsoft.com/devicelogin",
                "expires_in": 900,
                "interval": 5,
                "message": "Enter ABCD",
            },
        )

    authorization = await _client(handler).start_device_flow()

    assert authorization.device_code == "dev-1"
    assert authorization.interval == 5
    request = seen[0]
    assert str(request.url) == (
        "https://login.microsoftonline.com/contoso/oauth2/v2.0/devicecode"
    )
    assert _form(request) == {
        "client_id": "client-abc",
        "scope": "offline_access user.read mail.read",
    }


@pytest.mark.asyncio
async def test_start_device_flow_error_payload_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            400,
            json={"error": "invalid_client", "error_description": "Unknown app"},
        )

    with pytest.raises(AuthorizationError, match="Unknown app"):
        await _client(handler).start_device_flow()


@pytest.mark.asyncio
async def test_start_device_flow_incomplete_payload_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"device_code": "dev-1"})

    with pytest.raises(AuthorizationError, match="device code endpoint"):
        await _client(handler).start_device_flow()


@pytest.mark.asyncio
async def test_poll_returns_error_variant_for_400() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert _form(request) == {
            "grant_type": "urn:ietf:params:oauth:grant-type:device_code",
            "client_id": "client-abc",
            "device_code": "dev-1",
        }
        return httpx.Response(
            400,
            json={
                "error": "authorization_pending",
                "error_description": "AADSTS70016: pending",
                "error_codes": [70016],
                "trace_id": "t",
                "correlation_id": "c",
            },
        )

    response = await _client(handler).poll_device_token("dev-1")

    assert isinstance(response, TokenError)
    assert response.is_pending
    assert response.error_codes == [70016]


@pytest.mark.asyncio
async def test_refresh_returns_grant_variant() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/contoso/oauth2/v2.0/token"
        assert _form(request) == {
            "grant_type": "refresh_token",
            "client_id": "client-abc",
            "scope": "offline_access user.read mail.read",
            "refresh_token": "refresh-1",
        }
        return httpx.Response(
            200,
            json={
                "token_type": "Bearer",
                "scope": "User.Read Mail.Read",
                "expires_in": 3599,
                "access_token": "access-2",
                "refresh_token": "refresh-2",
            },
        )

    response = await _client(handler).refresh_token("refresh-1")

    assert isinstance(response, TokenGrant)
    assert response.access_token == "access-2"
    assert response.refresh_token == "refresh-2"
    assert response.id_token is None


@pytest.mark.asyncio
async def test_server_errors_propagate_as_http_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="Service Unavailable")

    with pytest.raises(httpx.HTTPStatusError):
        await _client(handler).refresh_token("refresh-1")


@pytest.mark.asyncio
async def test_unrecognised_payload_is_an_authorization_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"unexpected": True})

    with pytest.raises(AuthorizationError):
        await _client(handler).poll_device_token("dev-1")

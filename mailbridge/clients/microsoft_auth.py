"""
Microsoft identity platform client for the OAuth2 device-code grant.

Only the raw endpoint calls live here; the token lifecycle is handled by
``mailbridge.services.auth_provider``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from mailbridge.core.config import MicrosoftAppSettings
from mailbridge.schemas.auth import (
    DeviceAuthorization,
    TokenError,
    TokenResponse,
    parse_token_response,
)

logger = logging.getLogger(__name__)


class AuthorizationError(Exception):
    """Raised when a usable access token cannot be obtained."""


class DeviceCodeExpiredError(AuthorizationError):
    """Raised when the device-code flow ends without the user approving it."""


class RefreshFailedError(AuthorizationError):
    """Raised when the token endpoint rejects a refresh token."""


class MicrosoftIdentityClient:
    """Call the ``devicecode`` and ``token`` endpoints of a tenant."""

    DEVICE_CODE_GRANT = "urn:ietf:params:oauth:grant-type:device_code"
    REFRESH_TOKEN_GRANT = "refresh_token"

    def __init__(
        self,
        app_settings: MicrosoftAppSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ) -> None:
        self._app = app_settings
        self._transport = transport
        self._timeout = timeout

    def _endpoint(self, name: str) -> str:
        base = self._app.authority_url.rstrip("/")
        return f"{base}/{self._app.tenant}/oauth2/v2.0/{name}"

    async def _post_form(self, url: str, data: Dict[str, str]) -> Dict[str, Any]:
        """POST a form and return the JSON body.

        4xx responses carry OAuth error payloads and are returned like any
        other body; 5xx responses raise ``httpx.HTTPStatusError``.
        """
        async with httpx.AsyncClient(
            timeout=self._timeout, transport=self._transport
        ) as client:
            response = await client.post(url, data=data)

        if response.status_code >= 500:
            response.raise_for_status()
        try:
            return response.json()
        except ValueError as exc:
            raise AuthorizationError(
                f"Authorization server returned a non-JSON response "
                f"(HTTP {response.status_code})."
            ) from exc

    @staticmethod
    def _parse(payload: Dict[str, Any]) -> TokenResponse:
        try:
            return parse_token_response(payload)
        except ValueError as exc:
            raise AuthorizationError(
                "Unexpected response from the token endpoint."
            ) from exc

    async def start_device_flow(self) -> DeviceAuthorization:
        """Request a device code and the sign-in instructions for the user."""
        payload = await self._post_form(
            self._endpoint("devicecode"),
            {"client_id": self._app.client_id, "scope": self._app.scope},
        )
        if "error" in payload:
            error = TokenError.model_validate(payload)
            raise AuthorizationError(
                f"Could not start device authorization: {error.describe()}"
            )
        try:
            authorization = DeviceAuthorization.model_validate(payload)
        except ValueError as exc:
            raise AuthorizationError(
                "Unexpected response from the device code endpoint."
            ) from exc
        logger.debug(
            "Device code issued; expires in %ss, poll interval %ss",
            authorization.expires_in,
            authorization.interval,
        )
        return authorization

    async def poll_device_token(self, device_code: str) -> TokenResponse:
        """Ask whether the user has approved ``device_code`` yet."""
        payload = await self._post_form(
            self._endpoint("token"),
            {
                "grant_type": self.DEVICE_CODE_GRANT,
                "client_id": self._app.client_id,
                "device_code": device_code,
            },
        )
        return self._parse(payload)

    async def refresh_token(self, refresh_token: str) -> TokenResponse:
        """Exchange a refresh token for a new token set."""
        payload = await self._post_form(
            self._endpoint("token"),
            {
                "grant_type": self.REFRESH_TOKEN_GRANT,
                "client_id": self._app.client_id,
                "scope": self._app.scope,
                "refresh_token": refresh_token,
            },
        )
        return self._parse(payload)


__all__ = [
    "AuthorizationError",
    "DeviceCodeExpiredError",
    "MicrosoftIdentityClient",
    "RefreshFailedError",
]

"""Microsoft Graph client for the mail endpoints the forwarder reads."""

from __future__ import annotations

import logging
from typing import Any, AsyncGenerator, Dict, List, Optional, Protocol

import httpx

from mailbridge.schemas.mail import DeltaPage, GraphUser, MailFolder
from mailbridge.utils.http import RetryConfig, request_with_retry

logger = logging.getLogger(__name__)


class AccessTokenProvider(Protocol):
    async def get_access_token(self) -> str:
        ...


class _TokenFetchFailed(Exception):
    """Carries an HTTP failure from the token provider past the Graph retry loop."""

    def __init__(self, cause: httpx.HTTPError) -> None:
        super().__init__(str(cause))
        self.cause = cause


class BearerTokenAuth(httpx.Auth):
    """Attach a freshly requested bearer token to every outgoing request."""

    def __init__(self, provider: AccessTokenProvider) -> None:
        self._provider = provider

    async def async_auth_flow(
        self, request: httpx.Request
    ) -> AsyncGenerator[httpx.Request, httpx.Response]:
        try:
            token = await self._provider.get_access_token()
        except httpx.HTTPError as exc:
            # Faults from the identity endpoints are never retried here.
            raise _TokenFetchFailed(exc) from exc
        request.headers["Authorization"] = f"Bearer {token}"
        yield request


class GraphClient:
    """Issue authenticated GET requests against Microsoft Graph.

    A fresh token is requested from the provider before every request, so
    expiry and refresh are handled at the point of use.
    """

    BASE_URL = "https://graph.microsoft.com/v1.0"

    def __init__(
        self,
        auth_provider: AccessTokenProvider,
        *,
        base_url: str = BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
        retry_config: RetryConfig | None = None,
    ) -> None:
        self._auth = BearerTokenAuth(auth_provider)
        self._base_url = base_url.rstrip("/")
        self._transport = transport
        self._timeout = timeout
        self._retry = retry_config or RetryConfig()

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
            auth=self._auth,
        )

    async def get(self, path_or_url: str) -> Dict[str, Any]:
        """GET a path relative to the API root, or an absolute ``@odata`` link."""
        async with self._client() as client:
            try:
                response = await request_with_retry(
                    client.get, path_or_url, retry_config=self._retry
                )
            except _TokenFetchFailed as exc:
                raise exc.cause from None
        return response.json()

    async def get_me(self) -> GraphUser:
        return GraphUser.model_validate(await self.get("/me"))

    async def list_mail_folders(self) -> List[MailFolder]:
        payload = await self.get("/me/mailFolders")
        return [MailFolder.model_validate(item) for item in payload.get("value", [])]

    @staticmethod
    def initial_delta_link(folder_id: str, page_size: int = 10) -> str:
        return f"/me/mailFolders/{folder_id}/messages/delta?$top={page_size}"

    async def get_delta_page(self, link: str) -> DeltaPage:
        page = DeltaPage.model_validate(await self.get(link))
        logger.debug(
            "Delta page returned %d message(s); more pages: %s",
            len(page.value),
            page.next_link is not None,
        )
        return page


__all__ = ["AccessTokenProvider", "BearerTokenAuth", "GraphClient"]

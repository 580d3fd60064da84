"""Minimal Telegram Bot API client."""

from __future__ import annotations

from typing import Any, Dict, Optional, Union

import httpx
from pydantic import BaseModel

from mailbridge.core.config import TelegramSettings
from mailbridge.utils.http import RetryConfig, request_with_retry

ChatId = Union[int, str]


class TelegramAPIError(Exception):
    """Raised when the Bot API answers with ``ok: false``."""


class TelegramChat(BaseModel):
    id: int
    type: str
    title: Optional[str] = None
    username: Optional[str] = None


class TelegramBotClient:
    """Call Bot API methods for a single bot token."""

    def __init__(
        self,
        settings: TelegramSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._timeout = timeout

    def _method_url(self, method: str) -> str:
        base = self._settings.api_base_url.rstrip("/")
        return f"{base}/bot{self._settings.bot_token}/{method}"

    async def _call(self, method: str, payload: Dict[str, Any]) -> Any:
        async with httpx.AsyncClient(
            timeout=self._timeout,
            transport=self._transport,
            proxy=self._settings.proxy_url,
        ) as client:
            try:
                response = await request_with_retry(
                    client.post,
                    self._method_url(method),
                    json=payload,
                    retry_config=RetryConfig(),
                )
            except httpx.HTTPStatusError as exc:
                # The Bot API explains 4xx failures in the body.
                raise TelegramAPIError(_describe(exc.response, method)) from exc

        body = response.json()
        if not body.get("ok"):
            raise TelegramAPIError(_describe(response, method))
        return body.get("result")

    async def get_chat(self, chat_id: ChatId) -> TelegramChat:
        """Resolve a numeric id or ``@channelname`` to a chat."""
        return TelegramChat.model_validate(
            await self._call("getChat", {"chat_id": chat_id})
        )

    async def send_message(
        self, chat_id: ChatId, text: str, *, parse_mode: Optional[str] = "Markdown"
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"chat_id": chat_id, "text": text}
        if parse_mode:
            payload["parse_mode"] = parse_mode
        return await self._call("sendMessage", payload)


def _describe(response: httpx.Response, method: str) -> str:
    try:
        description = response.json().get("description")
    except ValueError:
        description = None
    return f"Telegram {method} failed: {description or response.status_code}"


__all__ = ["TelegramAPIError", "TelegramBotClient", "TelegramChat"]

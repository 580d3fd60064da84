"""Expose constructed client wrappers."""

from .graph import GraphClient
from .microsoft_auth import (
    AuthorizationError,
    DeviceCodeExpiredError,
    MicrosoftIdentityClient,
    RefreshFailedError,
)
from .sqlite_store import SQLiteStore
from .telegram import TelegramAPIError, TelegramBotClient

__all__ = [
    "AuthorizationError",
    "DeviceCodeExpiredError",
    "GraphClient",
    "MicrosoftIdentityClient",
    "RefreshFailedError",
    "SQLiteStore",
    "TelegramAPIError",
    "TelegramBotClient",
]

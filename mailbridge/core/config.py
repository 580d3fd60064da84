"""
Application configuration models and helpers.

Centralizes settings management so the CLI, the auth provider and the
forwarding service share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

import os

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


_SETTINGS_CONFIG = SettingsConfigDict(extra="ignore", populate_by_name=True)


class MicrosoftAppSettings(BaseSettings):
    """Application registration used against the Microsoft identity platform."""

    model_config = _SETTINGS_CONFIG

    client_id: str = Field(..., validation_alias="APP_ID")
    client_secret: str = Field(
        "",
        validation_alias="APP_SECRET",
        description="Unused by the device-code flow; kept for confidential clients.",
    )
    tenant: str = Field("common", validation_alias="TENANT")
    scope: str = Field(
        "offline_access user.read mail.read",
        validation_alias="APP_SCOPE",
    )
    authority_url: str = Field(
        "https://login.microsoftonline.com", validation_alias="AUTHORITY_URL"
    )

    @field_validator("scope")
    @classmethod
    def _require_offline_access(cls, value: str) -> str:
        """Refresh tokens are only issued when offline access is requested."""
        scopes = value.split()
        if "offline_access" not in scopes:
            raise ValueError("scope must include 'offline_access'")
        return " ".join(scopes)


class TelegramSettings(BaseSettings):
    """Configuration for the Telegram bot that receives forwarded mail."""

    model_config = _SETTINGS_CONFIG

    bot_token: str = Field(..., validation_alias="BOT_TOKEN")
    proxy_url: Optional[str] = Field(
        None,
        validation_alias="PROXY_URL",
        description="Optional HTTP(S) proxy used for Bot API calls.",
    )
    api_base_url: str = Field(
        "https://api.telegram.org", validation_alias="TELEGRAM_API_URL"
    )


class StorageSettings(BaseSettings):
    """Where persisted state lives and how tokens are protected at rest."""

    model_config = _SETTINGS_CONFIG

    state_db_path: str = Field(
        "~/.config/mailbridge/state.db", validation_alias="MAILBRIDGE_STATE_DB"
    )
    token_encryption_secret: Optional[str] = Field(
        None,
        validation_alias="TOKEN_ENCRYPTION_SECRET",
        description=(
            "Secret used to derive the symmetric key for encrypting stored tokens."
        ),
    )

    @property
    def resolved_db_path(self) -> Path:
        return Path(self.state_db_path).expanduser()


class AppSettings(BaseSettings):
    """Root settings object for the mail bridge."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    graph_base_url: str = Field(
        "https://graph.microsoft.com/v1.0", validation_alias="GRAPH_BASE_URL"
    )
    delta_page_size: int = Field(10, validation_alias="DELTA_PAGE_SIZE", gt=0)
    token_expiry_margin: int = Field(
        0,
        validation_alias="TOKEN_EXPIRY_MARGIN",
        ge=0,
        description="Seconds subtracted from the token lifetime before refreshing.",
    )
    authorization_timeout: Optional[int] = Field(
        None,
        validation_alias="AUTHORIZATION_TIMEOUT",
        gt=0,
        description="Upper bound in seconds for waiting on device-code approval.",
    )
    microsoft: MicrosoftAppSettings = Field(default_factory=MicrosoftAppSettings)
    telegram: TelegramSettings = Field(default_factory=TelegramSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "MicrosoftAppSettings",
    "StorageSettings",
    "TelegramSettings",
    "get_settings",
]

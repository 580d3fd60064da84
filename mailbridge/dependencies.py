"""
Factory functions that wire settings, stores and clients together.
"""

from datetime import timedelta
from functools import lru_cache

from mailbridge.clients import (
    GraphClient,
    MicrosoftIdentityClient,
    SQLiteStore,
    TelegramBotClient,
)
from mailbridge.core.config import get_settings
from mailbridge.services import (
    AuthProvider,
    ForwardingStateStore,
    MailForwarder,
    SQLiteCredentialStore,
    TokenCipherService,
)


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


def app_namespace() -> str:
    """State is keyed by application identity."""
    return f"app#{_settings().microsoft.client_id}"


@lru_cache()
def get_sqlite_store() -> SQLiteStore:
    """Provide the shared state database."""
    return SQLiteStore(_settings().storage.resolved_db_path)


@lru_cache()
def get_token_cipher_service() -> TokenCipherService | None:
    """Provide token encryption when a secret is configured."""
    secret = _settings().storage.token_encryption_secret
    if not secret:
        return None
    return TokenCipherService(secret=secret)


@lru_cache()
def get_identity_client() -> MicrosoftIdentityClient:
    return MicrosoftIdentityClient(_settings().microsoft)


@lru_cache()
def get_auth_provider() -> AuthProvider:
    """Provide the process-wide token provider."""
    settings = _settings()
    store = SQLiteCredentialStore(
        get_sqlite_store(),
        namespace=app_namespace(),
        cipher=get_token_cipher_service(),
    )
    return AuthProvider(
        get_identity_client(),
        store,
        expiry_margin=timedelta(seconds=settings.token_expiry_margin),
        authorization_timeout=settings.authorization_timeout,
    )


@lru_cache()
def get_graph_client() -> GraphClient:
    return GraphClient(get_auth_provider(), base_url=_settings().graph_base_url)


@lru_cache()
def get_telegram_client() -> TelegramBotClient:
    return TelegramBotClient(_settings().telegram)


@lru_cache()
def get_forwarding_state_store() -> ForwardingStateStore:
    return ForwardingStateStore(get_sqlite_store(), namespace=app_namespace())


def get_mail_forwarder() -> MailForwarder:
    """Build a forwarder using the configured clients."""
    return MailForwarder(
        get_graph_client(),
        get_telegram_client(),
        get_forwarding_state_store(),
        page_size=_settings().delta_page_size,
    )


__all__ = [
    "app_namespace",
    "get_auth_provider",
    "get_forwarding_state_store",
    "get_graph_client",
    "get_identity_client",
    "get_mail_forwarder",
    "get_sqlite_store",
    "get_telegram_client",
    "get_token_cipher_service",
]

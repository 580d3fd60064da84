"""Domain services built on top of the API clients."""

from .auth_provider import AUTH_STORE_KEY, AuthProvider, AuthState
from .credential_store import CredentialStore, SQLiteCredentialStore
from .forwarding_setup import ForwardingSetupError, prompt_forwarding_target
from .forwarding_state import ForwardingStateStore, ForwardingTarget
from .mail_forwarder import ForwardedMessage, MailForwarder, html_to_markdown
from .token_cipher import TokenCipherService

__all__ = [
    "AUTH_STORE_KEY",
    "AuthProvider",
    "AuthState",
    "CredentialStore",
    "ForwardedMessage",
    "ForwardingSetupError",
    "ForwardingStateStore",
    "ForwardingTarget",
    "MailForwarder",
    "SQLiteCredentialStore",
    "TokenCipherService",
    "html_to_markdown",
    "prompt_forwarding_target",
]

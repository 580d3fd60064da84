"""
Persistence for the OAuth token record.

``AuthProvider`` only needs ``load`` and ``save``; anything with those two
methods (for example an in-memory dict in tests) can stand in for the SQLite
implementation.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from mailbridge.clients.sqlite_store import SQLiteStore
from mailbridge.models.oauth import TokenRecord
from mailbridge.services.token_cipher import TokenCipherService, is_sealed

logger = logging.getLogger(__name__)


class CredentialStore(Protocol):
    def load(self, key: str) -> Optional[TokenRecord]:
        ...

    def save(self, key: str, record: TokenRecord) -> None:
        ...


class SQLiteCredentialStore:
    """Store token records in :class:`SQLiteStore`, optionally encrypted."""

    def __init__(
        self,
        store: SQLiteStore,
        *,
        namespace: str,
        cipher: TokenCipherService | None = None,
    ) -> None:
        self._store = store
        self._namespace = namespace
        self._cipher = cipher

    def save(self, key: str, record: TokenRecord) -> None:
        data = record.to_storage()
        if self._cipher is not None:
            data = self._cipher.seal(data)
        self._store.put(self._namespace, key, data)

    def load(self, key: str) -> Optional[TokenRecord]:
        """Return the stored record, or ``None`` when it is missing or unusable."""
        data = self._store.get(self._namespace, key)
        if data is None:
            return None

        if is_sealed(data):
            if self._cipher is None:
                logger.warning(
                    "Stored credentials are encrypted but no "
                    "TOKEN_ENCRYPTION_SECRET is configured; ignoring them."
                )
                return None
            try:
                data = self._cipher.unseal(data)
            except (KeyError, ValueError) as exc:
                logger.warning("Could not decrypt stored credentials: %s", exc)
                return None

        try:
            return TokenRecord.from_storage(data)
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Stored credentials are malformed: %s", exc)
            return None


__all__ = ["CredentialStore", "SQLiteCredentialStore"]

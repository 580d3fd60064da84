"""Field-level encryption for token records kept in the local state database."""

from __future__ import annotations

import base64
import hashlib
from typing import Any, Dict, Iterable

from cryptography.fernet import Fernet, InvalidToken

ENCRYPTED_MARKER = "encrypted"
SECRET_FIELDS = ("accessToken", "refreshToken")


class TokenCipherService:
    """Seal the secret fields of a storage document with a Fernet key.

    The key is the SHA-256 digest of ``TOKEN_ENCRYPTION_SECRET``, so any
    passphrase works and the same passphrase always opens the same records.
    Non-secret fields such as ``expireDate`` stay readable.
    """

    def __init__(self, *, secret: str, fields: Iterable[str] = SECRET_FIELDS) -> None:
        if not secret:
            raise ValueError("TOKEN_ENCRYPTION_SECRET must not be empty.")
        key = base64.urlsafe_b64encode(hashlib.sha256(secret.encode("utf-8")).digest())
        self._fernet = Fernet(key)
        self._fields = tuple(fields)

    def encrypt(self, value: str) -> str:
        return self._fernet.encrypt(value.encode("utf-8")).decode("ascii")

    def decrypt(self, value: str) -> str:
        if not isinstance(value, str):
            raise ValueError("Encrypted token fields must be strings.")
        try:
            return self._fernet.decrypt(value.encode("ascii")).decode("utf-8")
        except (InvalidToken, UnicodeEncodeError) as exc:
            raise ValueError(
                "Failed to decrypt token; the encryption secret may have changed."
            ) from exc

    def seal(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """Return a copy of ``document`` with its secret fields encrypted."""
        sealed = dict(document)
        for field in self._fields:
            sealed[field] = self.encrypt(sealed[field])
        sealed[ENCRYPTED_MARKER] = True
        return sealed

    def unseal(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """Reverse :meth:`seal`.

        Raises ``ValueError`` when a field cannot be decrypted and
        ``KeyError`` when one is missing.
        """
        opened = {key: value for key, value in document.items() if key != ENCRYPTED_MARKER}
        for field in self._fields:
            opened[field] = self.decrypt(opened[field])
        return opened


def is_sealed(document: Dict[str, Any]) -> bool:
    return bool(document.get(ENCRYPTED_MARKER))


__all__ = ["TokenCipherService", "is_sealed"]

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import pytest

from mailbridge.services.token_cipher import TokenCipherService, is_sealed

DOCUMENT = {"accessToken": "access-1", "expireDate": 1709287200123, "refreshToken": "refresh-1"}


def test_seal_encrypts_only_secret_fields() -> None:
    cipher = TokenCipherService(secret="super-secret-key")

    sealed = cipher.seal(DOCUMENT)

    assert is_sealed(sealed)
    assert sealed["expireDate"] == 1709287200123
    assert sealed["accessToken"] != "access-1"
    assert sealed["refreshToken"] != "refresh-1"
    assert not is_sealed(DOCUMENT)
    assert cipher.unseal(sealed) == DOCUMENT


def test_same_passphrase_opens_records_across_instances() -> None:
    sealed = TokenCipherService(secret="passphrase").seal(DOCUMENT)

    assert TokenCipherService(secret="passphrase").unseal(sealed) == DOCUMENT


def test_unseal_with_another_secret_fails() -> None:
    sealed = TokenCipherService(secret="first").seal(DOCUMENT)

    with pytest.raises(ValueError, match="secret may have changed"):
        TokenCipherService(secret="second").unseal(sealed)


def test_unseal_rejects_non_string_field() -> None:
    cipher = TokenCipherService(secret="first")
    sealed = dict(cipher.seal(DOCUMENT), accessToken=42)

    with pytest.raises(ValueError):
        cipher.unseal(sealed)


def test_token_cipher_requires_secret() -> None:
    with pytest.raises(ValueError):
        TokenCipherService(secret="")

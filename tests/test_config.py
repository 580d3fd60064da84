from __future__ import annotations

import pytest
from pydantic import ValidationError

from mailbridge.core.config import MicrosoftAppSettings, StorageSettings


def test_app_registration_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TENANT", raising=False)
    monkeypatch.delenv("APP_SCOPE", raising=False)

    settings = MicrosoftAppSettings(APP_ID="client")

    assert settings.tenant == "common"
    assert settings.scope == "offline_access user.read mail.read"
    assert settings.client_secret == ""


def test_scope_without_offline_access_is_rejected() -> None:
    with pytest.raises(ValidationError):
        MicrosoftAppSettings(APP_ID="client", APP_SCOPE="user.read mail.read")


def test_settings_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ID", "env-client")
    monkeypatch.setenv("TENANT", "contoso")

    settings = MicrosoftAppSettings()

    assert settings.client_id == "env-client"
    assert settings.tenant == "contoso"


def test_state_db_path_expands_home(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))

    settings = StorageSettings(MAILBRIDGE_STATE_DB="~/state.db")

    assert settings.resolved_db_path == tmp_path / "state.db"

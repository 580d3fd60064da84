"""Tests for the command-line entry point."""

from __future__ import annotations

import pytest

from mailbridge import dependencies, main as cli
from mailbridge.clients.microsoft_auth import DeviceCodeExpiredError
from mailbridge.schemas.mail import GraphUser
from mailbridge.services.forwarding_setup import ForwardingSetupError
from mailbridge.services.forwarding_state import ForwardingTarget
from mailbridge.services.mail_forwarder import ForwardedMessage


class FakeGraphClient:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error

    async def get_me(self) -> GraphUser:
        if self.error:
            raise self.error
        return GraphUser(displayName="Ada Lovelace", mail="ada@example.com")


class FakeStateStore:
    def __init__(self, target: ForwardingTarget | None) -> None:
        self.target = target

    def load_target(self) -> ForwardingTarget | None:
        return self.target


class FakeForwarder:
    def __init__(self) -> None:
        self.targets: list[ForwardingTarget] = []

    async def run_once(self, target: ForwardingTarget) -> list[ForwardedMessage]:
        self.targets.append(target)
        return [ForwardedMessage(subject="Hi", body="there")]


@pytest.fixture()
def wired(monkeypatch: pytest.MonkeyPatch):
    target = ForwardingTarget("inbox", "-100", "team@example.com")
    forwarder = FakeForwarder()
    graph = FakeGraphClient()
    monkeypatch.setattr(dependencies, "get_graph_client", lambda: graph)
    monkeypatch.setattr(dependencies, "get_telegram_client", lambda: object())
    monkeypatch.setattr(
        dependencies, "get_forwarding_state_store", lambda: FakeStateStore(target)
    )
    monkeypatch.setattr(dependencies, "get_mail_forwarder", lambda: forwarder)
    return graph, forwarder, target


def test_main_forwards_with_saved_target(wired, capsys: pytest.CaptureFixture[str]) -> None:
    _, forwarder, target = wired

    exit_code = cli.main(["--log-level", "WARNING"])

    assert exit_code == cli.EXIT_OK
    assert forwarder.targets == [target]
    out = capsys.readouterr().out
    assert "Authorized as Ada Lovelace (ada@example.com)" in out
    assert "Forwarded 1 message(s) to chat -100" in out


def test_main_reports_authorization_failure(
    wired, capsys: pytest.CaptureFixture[str]
) -> None:
    graph, forwarder, _ = wired
    graph.error = DeviceCodeExpiredError("Device code has expired. Please, try again.")

    exit_code = cli.main([])

    assert exit_code == cli.EXIT_FAILURE
    assert forwarder.targets == []
    assert "Device code has expired" in capsys.readouterr().err


def test_main_reports_unfinished_setup(
    wired, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    _, forwarder, _ = wired
    monkeypatch.setattr(
        dependencies, "get_forwarding_state_store", lambda: FakeStateStore(None)
    )

    async def closed_stdin(*args, **kwargs):
        raise EOFError

    monkeypatch.setattr(cli, "prompt_forwarding_target", closed_stdin)

    exit_code = cli.main([])

    assert exit_code == cli.EXIT_FAILURE
    assert forwarder.targets == []
    assert "Input closed" in capsys.readouterr().err


def test_main_reports_empty_mailbox(
    wired, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(
        dependencies, "get_forwarding_state_store", lambda: FakeStateStore(None)
    )

    async def no_folders(*args, **kwargs):
        raise ForwardingSetupError("The mailbox has no folders to forward.")

    monkeypatch.setattr(cli, "prompt_forwarding_target", no_folders)

    assert cli.main([]) == cli.EXIT_FAILURE
    assert "no folders" in capsys.readouterr().err

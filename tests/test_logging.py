from __future__ import annotations

import logging
import sys

import pytest

from mailbridge.core.logging import configure_logging


@pytest.fixture()
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    chatty = {name: logging.getLogger(name).level for name in ("httpx", "httpcore", "noisy")}
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    for name, saved in chatty.items():
        logging.getLogger(name).setLevel(saved)


def test_reconfiguring_replaces_level_and_handlers(restore_logging) -> None:
    configure_logging("info")
    configure_logging("debug")

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert root.handlers[0].stream is sys.stderr


def test_chatty_loggers_stay_at_warning(restore_logging) -> None:
    configure_logging("DEBUG", chatty_loggers=("noisy",))

    assert logging.getLogger("noisy").level == logging.WARNING


def test_chatty_loggers_follow_a_stricter_root_level(restore_logging) -> None:
    configure_logging("ERROR")

    assert logging.getLogger("httpx").level == logging.ERROR
    assert logging.getLogger("httpcore").level == logging.ERROR

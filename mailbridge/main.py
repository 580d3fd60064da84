"""
Command-line entry point: authorize, pick a target once, forward new mail.

Example::

    python -m mailbridge
    python -m mailbridge --reconfigure --log-level DEBUG
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import httpx
from pydantic import ValidationError

from mailbridge import dependencies
from mailbridge.clients import AuthorizationError, TelegramAPIError
from mailbridge.core.config import get_settings
from mailbridge.core.logging import configure_logging
from mailbridge.services import ForwardingSetupError, prompt_forwarding_target

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mailbridge",
        description="Forward Microsoft 365 mail for one address to a Telegram chat.",
    )
    parser.add_argument(
        "--reconfigure",
        action="store_true",
        help="Ask for the folder, chat and filter address even if they are saved.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override APP_LOG_LEVEL for this run.",
    )
    return parser


async def _run(reconfigure: bool) -> int:
    graph = dependencies.get_graph_client()
    telegram = dependencies.get_telegram_client()
    state = dependencies.get_forwarding_state_store()

    me = await graph.get_me()
    print(f"Authorized as {me.display_name} ({me.mail or me.user_principal_name})")

    target = None if reconfigure else state.load_target()
    if target is None:
        target = await prompt_forwarding_target(graph, telegram, state)

    forwarded = await dependencies.get_mail_forwarder().run_once(target)
    print(f"Forwarded {len(forwarded)} message(s) to chat {target.chat_id}")
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as exc:
        print(f"Invalid configuration:\n{exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    configure_logging(args.log_level or settings.log_level)

    try:
        return asyncio.run(_run(args.reconfigure))
    except (AuthorizationError, ForwardingSetupError, TelegramAPIError) as exc:
        print(str(exc), file=sys.stderr)
    except httpx.HTTPError as exc:
        logger.debug("HTTP failure", exc_info=True)
        print(f"Network error: {exc}", file=sys.stderr)
    except EOFError:
        print("Input closed before setup finished.", file=sys.stderr)
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
    return EXIT_FAILURE


__all__ = ["main"]

"""Forward new mail from a Graph delta query to a Telegram chat."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List

import html2text

from mailbridge.clients.graph import GraphClient
from mailbridge.clients.telegram import TelegramBotClient
from mailbridge.schemas.mail import Message
from mailbridge.services.forwarding_state import ForwardingStateStore, ForwardingTarget

logger = logging.getLogger(__name__)

ATTACHMENT_NOTE = "(attachments are not forwarded)"

_NEWLINE_PADDING = re.compile(r"\s*\n\s*")


def html_to_markdown(content: str) -> str:
    """Convert an HTML mail body to compact markdown.

    Leading and trailing whitespace is dropped and every newline run, along
    with the spaces around it, collapses to a single newline.
    """
    converter = html2text.HTML2Text()
    converter.body_width = 0
    markdown = converter.handle(content or "")
    return _NEWLINE_PADDING.sub("\n", markdown.strip())


@dataclass(slots=True)
class ForwardedMessage:
    subject: str
    body: str
    has_attachments: bool = False

    def render(self) -> str:
        text = f"# {self.subject}\n\n{self.body}"
        if self.has_attachments:
            text += f"\n\n{ATTACHMENT_NOTE}"
        return text


def select_messages(messages: Iterable[Message], filter_email: str) -> List[Message]:
    """Keep messages where ``filter_email`` is a To, Cc or Bcc recipient."""
    wanted = filter_email.lower()
    return [m for m in messages if wanted in m.recipient_addresses()]


def to_forwarded(message: Message) -> ForwardedMessage:
    body = message.body
    content = (body.content if body else None) or ""
    if body is not None and body.content_type.lower() == "text":
        text = _NEWLINE_PADDING.sub("\n", content.strip())
    else:
        text = html_to_markdown(content)
    return ForwardedMessage(
        subject=message.subject or "",
        body=text,
        has_attachments=bool(message.has_attachments),
    )


class MailForwarder:
    """Fetch one delta page and forward the matching messages."""

    def __init__(
        self,
        graph_client: GraphClient,
        telegram_client: TelegramBotClient,
        state_store: ForwardingStateStore,
        *,
        page_size: int = 10,
    ) -> None:
        self._graph = graph_client
        self._telegram = telegram_client
        self._state = state_store
        self._page_size = page_size

    async def run_once(self, target: ForwardingTarget) -> List[ForwardedMessage]:
        link = self._state.get_delta_link() or GraphClient.initial_delta_link(
            target.folder_id, self._page_size
        )
        page = await self._graph.get_delta_page(link)

        forwarded = [
            to_forwarded(message)
            for message in select_messages(page.value, target.filter_email)
        ]
        logger.info(
            "Fetched %d message(s), %d addressed to %s",
            len(page.value),
            len(forwarded),
            target.filter_email,
        )

        for message in forwarded:
            await self._telegram.send_message(target.chat_id, message.render())

        # Only advance once everything on this page has been delivered.
        if page.continuation:
            self._state.set_delta_link(page.continuation)
        return forwarded


__all__ = [
    "ATTACHMENT_NOTE",
    "ForwardedMessage",
    "MailForwarder",
    "html_to_markdown",
    "select_messages",
    "to_forwarded",
]

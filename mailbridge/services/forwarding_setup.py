"""Interactive selection of the folder, chat and filter address to forward."""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Sequence

from mailbridge.clients.graph import GraphClient
from mailbridge.clients.telegram import TelegramBotClient
from mailbridge.schemas.mail import MailFolder
from mailbridge.services.forwarding_state import ForwardingStateStore, ForwardingTarget

logger = logging.getLogger(__name__)

InputFunc = Callable[[str], str]
PrintFunc = Callable[[str], object]


class ForwardingSetupError(Exception):
    """Raised when the mailbox offers nothing that can be forwarded."""


def _ask(question: str, default: Optional[str], input_func: InputFunc) -> str:
    suffix = f" [{default}]" if default else ""
    while True:
        answer = input_func(f"{question}{suffix}: ").strip()
        if answer:
            return answer
        if default:
            return default


def choose_folder(
    folders: Sequence[MailFolder],
    *,
    default_id: Optional[str],
    input_func: InputFunc = input,
    print_func: PrintFunc = print,
) -> MailFolder:
    """Print a numbered folder list and return the user's pick."""
    if not folders:
        raise ForwardingSetupError("The mailbox has no folders to forward.")

    print_func("Please select the folder to forward:")
    default_index: Optional[str] = None
    for index, folder in enumerate(folders, start=1):
        print_func(f"  {index}) {folder.label}")
        if folder.id == default_id:
            default_index = str(index)

    while True:
        answer = _ask("Folder number", default_index, input_func)
        if answer.isdigit() and 1 <= int(answer) <= len(folders):
            return folders[int(answer) - 1]
        print_func(f"Please enter a number between 1 and {len(folders)}.")


async def prompt_forwarding_target(
    graph_client: GraphClient,
    telegram_client: TelegramBotClient,
    state_store: ForwardingStateStore,
    *,
    input_func: InputFunc = input,
    print_func: PrintFunc = print,
) -> ForwardingTarget:
    """Ask for the forwarding target, resolve ``@channel`` names and save it."""
    defaults: Dict[str, str] = {
        key: str(value)
        for key, value in state_store.partial_target().items()
        if value
    }
    folders: List[MailFolder] = await graph_client.list_mail_folders()

    folder = choose_folder(
        folders,
        default_id=defaults.get("folderId"),
        input_func=input_func,
        print_func=print_func,
    )
    chat_id = _ask(
        "Please input @channelname or chat id", defaults.get("chatId"), input_func
    )
    filter_email = _ask(
        "Please input email to get messages for",
        defaults.get("filterEmail"),
        input_func,
    )

    if chat_id.startswith("@"):
        chat = await telegram_client.get_chat(chat_id)
        logger.info("Resolved %s to chat id %s", chat_id, chat.id)
        chat_id = str(chat.id)

    target = ForwardingTarget(
        folder_id=folder.id, chat_id=chat_id, filter_email=filter_email
    )
    state_store.save_target(target)
    return target


__all__ = ["ForwardingSetupError", "choose_folder", "prompt_forwarding_target"]

"""Persisted forwarding choices and the delta-query cursor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from mailbridge.clients.sqlite_store import SQLiteStore

TARGET_KEY = "forwarding"
DELTA_LINK_KEY = "deltaLink"


@dataclass(slots=True)
class ForwardingTarget:
    """Which folder to watch, where to send mail, and whose mail to send."""

    folder_id: str
    chat_id: str
    filter_email: str


class ForwardingStateStore:
    """Read and write forwarding state for one application namespace."""

    def __init__(self, store: SQLiteStore, *, namespace: str) -> None:
        self._store = store
        self._namespace = namespace

    def load_target(self) -> Optional[ForwardingTarget]:
        """Return the saved target, or ``None`` unless every field is set."""
        data = self._store.get(self._namespace, TARGET_KEY) or {}
        folder_id = data.get("folderId")
        chat_id = data.get("chatId")
        filter_email = data.get("filterEmail")
        if not folder_id or not chat_id or not filter_email:
            return None
        return ForwardingTarget(
            folder_id=folder_id, chat_id=str(chat_id), filter_email=filter_email
        )

    def partial_target(self) -> dict:
        """Whatever was saved before, for use as prompt defaults."""
        return self._store.get(self._namespace, TARGET_KEY) or {}

    def save_target(self, target: ForwardingTarget) -> None:
        previous_folder = self.partial_target().get("folderId")
        self._store.put(
            self._namespace,
            TARGET_KEY,
            {
                "folderId": target.folder_id,
                "chatId": target.chat_id,
                "filterEmail": target.filter_email,
            },
        )
        # A cursor belongs to the folder it was issued for.
        if previous_folder != target.folder_id:
            self.set_delta_link(None)

    def get_delta_link(self) -> Optional[str]:
        data = self._store.get(self._namespace, DELTA_LINK_KEY) or {}
        return data.get("link")

    def set_delta_link(self, link: Optional[str]) -> None:
        self._store.put(self._namespace, DELTA_LINK_KEY, {"link": link})


__all__ = ["ForwardingStateStore", "ForwardingTarget"]

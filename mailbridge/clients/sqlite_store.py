"""SQLite-backed key-value store for state that must survive between runs."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any, Dict, Optional


class SQLiteStore:
    """JSON documents keyed by ``(namespace, key)``.

    The namespace identifies the application registration so that two apps
    pointed at the same database never see each other's tokens.
    """

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = Path(db_path)
        if self._db_path.parent and not self._db_path.parent.exists():
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS state_records (
                    namespace TEXT NOT NULL,
                    key TEXT NOT NULL,
                    data TEXT NOT NULL,
                    PRIMARY KEY (namespace, key)
                )
                """
            )

    def put(self, namespace: str, key: str, value: Dict[str, Any]) -> None:
        """Insert or fully replace the document stored under ``key``."""
        if not namespace or not key:
            raise ValueError("Both namespace and key are required")

        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO state_records (namespace, key, data)
                VALUES (?, ?, ?)
                ON CONFLICT(namespace, key) DO UPDATE SET data = excluded.data
                """,
                (namespace, key, json.dumps(value)),
            )

    def get(self, namespace: str, key: str) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT data FROM state_records WHERE namespace = ? AND key = ?",
                (namespace, key),
            ).fetchone()
        if not row:
            return None
        return json.loads(row["data"])


__all__ = ["SQLiteStore"]

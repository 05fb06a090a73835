from __future__ import annotations

import sqlite3
from datetime import UTC, datetime
from uuid import uuid4

from loguru import logger

from chat_relay.errors import StoreError
from chat_relay.memory.store import MemoryStore
from chat_relay.models import ChatTurn, Speaker

_ROLES = ("user", "assistant")


def utc_now() -> str:
    return datetime.now(UTC).isoformat(timespec="microseconds")


class ChatLog:
    """Append-only, per-user ordered log of chat turns.

    Calls are synchronous. Each append reads MAX(seq) and inserts without
    yielding to the event loop, so seq assignment needs no extra locking.
    """

    def __init__(self, store: MemoryStore):
        self._store = store

    def append(self, uid: str, role: Speaker, text: str) -> ChatTurn:
        if role not in _ROLES:
            raise ValueError(f"Unsupported role: {role!r}")

        turn_id = str(uuid4())
        now = utc_now()
        try:
            with self._store.transaction():
                row = self._store.execute(
                    "SELECT COALESCE(MAX(seq), 0) AS max_seq FROM chats WHERE uid = ?",
                    (uid,),
                ).fetchone()
                next_seq = int(row["max_seq"]) + 1
                self._store.execute(
                    """
                    INSERT INTO chats (id, uid, seq, role, text, created_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (turn_id, uid, next_seq, role, text, now),
                )
        except sqlite3.Error as ex:
            raise StoreError(f"Failed to append {role} turn for {uid}: {ex}") from ex

        logger.debug(f"Appended {role} turn seq={next_seq} for uid={uid}")
        return ChatTurn(id=turn_id, uid=uid, seq=next_seq, role=role, text=text, created_at=now)

    def list_ordered(self, uid: str) -> list[ChatTurn]:
        try:
            rows = self._store.execute(
                """
                SELECT id, uid, seq, role, text, created_at
                FROM chats
                WHERE uid = ?
                ORDER BY created_at ASC, seq ASC
                """,
                (uid,),
            ).fetchall()
        except sqlite3.Error as ex:
            raise StoreError(f"Failed to read history for {uid}: {ex}") from ex

        return [
            ChatTurn(
                id=row["id"],
                uid=row["uid"],
                seq=int(row["seq"]),
                role=row["role"],
                text=row["text"],
                created_at=row["created_at"],
            )
            for row in rows
        ]

    def count(self, uid: str) -> int:
        row = self._store.execute(
            "SELECT COUNT(*) AS c FROM chats WHERE uid = ?",
            (uid,),
        ).fetchone()
        return int(row["c"]) if row is not None else 0

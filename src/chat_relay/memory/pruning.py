from __future__ import annotations

from datetime import UTC, datetime, timedelta

from loguru import logger

from chat_relay.memory.store import MemoryStore


def prune_history(
    store: MemoryStore,
    *,
    max_turns_per_user: int,
    retention_days: int,
) -> int:
    """Delete expired turns and cap each user's log. Zero disables a rule.

    Returns the number of deleted turns.
    """
    deleted = 0

    if retention_days > 0:
        cutoff = (datetime.now(UTC) - timedelta(days=retention_days)).isoformat(timespec="microseconds")
        cursor = store.execute(
            "DELETE FROM chats WHERE created_at < ?",
            (cutoff,),
        )
        deleted += max(0, cursor.rowcount)

    if max_turns_per_user > 0:
        users = store.execute("SELECT DISTINCT uid FROM chats").fetchall()
        for user_row in users:
            uid = str(user_row["uid"])
            overflow = store.execute(
                """
                SELECT id
                FROM chats
                WHERE uid = ?
                ORDER BY created_at DESC, seq DESC
                LIMIT -1 OFFSET ?
                """,
                (uid, max_turns_per_user),
            ).fetchall()
            if overflow:
                store.executemany(
                    "DELETE FROM chats WHERE id = ?",
                    [(str(row["id"]),) for row in overflow],
                )
                deleted += len(overflow)

    store.commit()
    if deleted:
        logger.info(f"Pruned {deleted} stored turn(s)")
    return deleted

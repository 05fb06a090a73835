from __future__ import annotations

from chat_relay.memory.chat_log import ChatLog
from chat_relay.models import ChatTurn, RecordOutcome, TranscriptEntry

_ROLE_MAP = {
    "user": "user",
    "assistant": "model",
}


def to_transcript(turns: list[ChatTurn]) -> list[TranscriptEntry]:
    return [TranscriptEntry(role=_ROLE_MAP[turn.role], content=turn.text) for turn in turns]


class HistoryProjector:
    """Builds the model-facing transcript from a user's stored turns."""

    def __init__(self, chat_log: ChatLog):
        self._chat_log = chat_log

    async def project(self, uid: str, user_turn: RecordOutcome | None = None) -> list[TranscriptEntry]:
        """Return prior turns for ``uid`` without the in-flight prompt.

        With no ``user_turn`` the last stored turn is taken to be the prompt
        and dropped. A successful ``user_turn`` is excluded by id, so a turn
        appended concurrently after it stays in place. A failed ``user_turn``
        stored nothing, so nothing is excluded.
        """
        turns = self._chat_log.list_ordered(uid)
        if user_turn is None:
            turns = turns[:-1]
        elif user_turn.ok:
            turns = [turn for turn in turns if turn.id != user_turn.turn_id]
        return to_transcript(turns)

from __future__ import annotations

from loguru import logger

from chat_relay.memory.chat_log import ChatLog
from chat_relay.models import RecordOutcome, Speaker


class TurnRecorder:
    def __init__(self, chat_log: ChatLog):
        self._chat_log = chat_log

    async def record(self, uid: str, role: Speaker, text: str) -> RecordOutcome:
        """Persist one turn. Failures are logged and returned, never raised."""
        try:
            turn = self._chat_log.append(uid, role, text)
        except Exception as ex:
            logger.exception(f"Failed to save {role} turn: {ex}")
            return RecordOutcome(error=str(ex) or type(ex).__name__)
        return RecordOutcome(turn_id=turn.id)

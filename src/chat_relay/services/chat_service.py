from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from chat_relay.errors import MissingInputError
from chat_relay.services.session_invoker import SessionInvoker
from chat_relay.services.turn_recorder import TurnRecorder

_MAX_ERROR_CHARS = 500


@dataclass(frozen=True)
class ChatReply:
    success: bool
    reply: str
    is_demo: bool
    error: str | None = None

    def to_dict(self) -> dict:
        body: dict = {"success": self.success, "reply": self.reply, "isDemo": self.is_demo}
        if self.error is not None:
            body["error"] = self.error
        return body


class ChatService:
    """Runs one chat request: persist prompt, invoke, persist reply."""

    def __init__(self, *, recorder: TurnRecorder, invoker: SessionInvoker):
        self._recorder = recorder
        self._invoker = invoker

    async def handle(self, uid: str | None, prompt: str | None) -> ChatReply:
        """Reject blank input; otherwise store and echo ``uid`` and ``prompt`` exactly as sent."""
        if not (uid or "").strip() or not (prompt or "").strip():
            raise MissingInputError()

        with logger.contextualize(uid=uid):
            user_turn = await self._recorder.record(uid, "user", prompt)
            result = await self._invoker.invoke(uid, prompt, user_turn)

            reply_turn = await self._recorder.record(uid, "assistant", result.text)
            if not reply_turn.ok:
                logger.warning(f"Reply was not saved to history: {reply_turn.error}")

        error: str | None = None
        if result.failure is not None:
            clean = " ".join(result.failure.raw_message.split())[:_MAX_ERROR_CHARS]
            error = f"{result.failure.kind.value}: {clean}"

        return ChatReply(success=True, reply=result.text, is_demo=result.is_demo, error=error)

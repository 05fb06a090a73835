from __future__ import annotations

from loguru import logger

from chat_relay.errors import ModelInvocationError
from chat_relay.models import Credentials, ErrorKind, InvocationResult, RecordOutcome
from chat_relay.provider import ModelProvider
from chat_relay.services.budget_policy import compute_budget
from chat_relay.services.failure_classifier import classify, fallback_reply
from chat_relay.services.history_projector import HistoryProjector


def demo_reply(prompt: str, env_var: str) -> str:
    return (
        f'Demo AI: You said "{prompt}". '
        f"Set {env_var} to enable real AI replies."
    )


class SessionInvoker:
    """Turns one prompt into one model call, or a demo reply without a credential."""

    def __init__(
        self,
        *,
        credentials: Credentials,
        projector: HistoryProjector,
        model: str,
        system_prompt: str,
        provider: ModelProvider | None = None,
    ) -> None:
        self._credentials = credentials
        self._projector = projector
        self._model = model
        self._system_prompt = system_prompt
        self._provider = provider

    @property
    def demo_mode(self) -> bool:
        return self._provider is None or not self._credentials.is_configured

    async def invoke(self, uid: str, prompt: str, user_turn: RecordOutcome | None = None) -> InvocationResult:
        if self.demo_mode:
            logger.info("No model credential configured; sending demo reply")
            return InvocationResult(text=demo_reply(prompt, self._credentials.env_var), is_demo=True)

        try:
            transcript = await self._projector.project(uid, user_turn)
            budget = compute_budget(prompt)
            logger.info(
                f"Invoking model={self._model} history={len(transcript)} "
                f"max_output_tokens={budget.max_output_tokens}"
            )
            text = await self._provider.generate(
                self._model,
                self._system_prompt,
                transcript,
                prompt,
                budget,
            )
            if not text or not text.strip():
                raise ModelInvocationError("the reply came back empty", kind=ErrorKind.UNKNOWN.value)
        except Exception as ex:
            classification = classify(ex)
            logger.warning(
                f"Model invocation failed: kind={classification.kind.value} "
                f"error={classification.raw_message}"
            )
            return InvocationResult(
                text=fallback_reply(classification),
                is_demo=True,
                failure=classification,
            )

        return InvocationResult(text=text.strip())

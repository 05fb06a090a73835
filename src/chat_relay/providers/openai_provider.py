import openai
from loguru import logger

from chat_relay.errors import ModelInvocationError
from chat_relay.models import GenerationBudget, TranscriptEntry
from chat_relay.providers.common import status_error_message, to_chat_messages


def _to_openai_messages(system_prompt: str, transcript: list[TranscriptEntry], prompt: str) -> list[dict]:
    out: list[dict] = []
    if system_prompt:
        out.append({"role": "system", "content": system_prompt})
    out.extend(to_chat_messages(transcript, prompt))
    return out


class OpenAIProvider:
    def __init__(self, api_key: str, *, timeout: float = 30.0):
        self._client = openai.AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    async def generate(
        self,
        model: str,
        system_prompt: str,
        transcript: list[TranscriptEntry],
        prompt: str,
        budget: GenerationBudget,
    ) -> str:
        """OpenAI has no top-k sampling; the rest of the budget maps directly."""
        messages = _to_openai_messages(system_prompt, transcript, prompt)
        logger.debug(
            f"API request: model={model}, max_tokens={budget.max_output_tokens}, "
            f"messages={len(messages)}"
        )
        try:
            response = await self._client.chat.completions.create(
                model=model,
                max_tokens=budget.max_output_tokens,
                temperature=budget.temperature,
                top_p=budget.top_p,
                messages=messages,
            )
        except openai.APIStatusError as ex:
            raise ModelInvocationError(
                status_error_message(ex.status_code, ex.message),
                status_code=ex.status_code,
            ) from ex
        except openai.APIError as ex:
            raise ModelInvocationError(f"OpenAI request failed: {ex}") from ex

        text = ""
        if response.choices:
            text = response.choices[0].message.content or ""
        logger.debug(f"API response: len={len(text)}")
        return text

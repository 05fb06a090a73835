import anthropic
from loguru import logger

from chat_relay.errors import ModelInvocationError
from chat_relay.models import GenerationBudget, TranscriptEntry
from chat_relay.providers.common import status_error_message, to_chat_messages


class AnthropicProvider:
    def __init__(self, api_key: str, *, timeout: float = 30.0):
        self._client = anthropic.AsyncAnthropic(api_key=api_key, timeout=timeout, max_retries=0)

    async def generate(
        self,
        model: str,
        system_prompt: str,
        transcript: list[TranscriptEntry],
        prompt: str,
        budget: GenerationBudget,
    ) -> str:
        messages = to_chat_messages(transcript, prompt)
        logger.debug(
            f"API request: model={model}, max_tokens={budget.max_output_tokens}, "
            f"messages={len(messages)}"
        )
        try:
            # top_p is omitted: current models reject it alongside temperature.
            response = await self._client.messages.create(
                model=model,
                max_tokens=budget.max_output_tokens,
                temperature=budget.temperature,
                top_k=budget.top_k,
                system=system_prompt,
                messages=messages,
            )
        except anthropic.APIStatusError as ex:
            raise ModelInvocationError(
                status_error_message(ex.status_code, ex.message),
                status_code=ex.status_code,
            ) from ex
        except anthropic.APIError as ex:
            raise ModelInvocationError(f"Anthropic request failed: {ex}") from ex

        usage = response.usage
        logger.debug(
            f"API response: stop_reason={response.stop_reason}, "
            f"input_tokens={usage.input_tokens}, output_tokens={usage.output_tokens}"
        )
        return "".join(block.text for block in response.content if block.type == "text")

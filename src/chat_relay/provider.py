from typing import Protocol, runtime_checkable

from chat_relay.models import GenerationBudget, TranscriptEntry


@runtime_checkable
class ModelProvider(Protocol):
    async def generate(
        self,
        model: str,
        system_prompt: str,
        transcript: list[TranscriptEntry],
        prompt: str,
        budget: GenerationBudget,
    ) -> str:
        """Run one non-streaming completion and return the reply text.

        Raises ModelInvocationError on any non-2xx condition from the remote
        service, carrying the HTTP status when one is available.
        """
        ...


def create_provider(provider_name: str, api_key: str, *, timeout: float = 30.0) -> ModelProvider:
    """Factory: create a ModelProvider by name."""
    name = provider_name.strip().lower()
    if name == "gemini":
        from chat_relay.providers.gemini_provider import GeminiProvider
        return GeminiProvider(api_key, timeout=timeout)
    if name == "anthropic":
        from chat_relay.providers.anthropic_provider import AnthropicProvider
        return AnthropicProvider(api_key, timeout=timeout)
    if name == "openai":
        from chat_relay.providers.openai_provider import OpenAIProvider
        return OpenAIProvider(api_key, timeout=timeout)
    raise ValueError(f"Unknown provider: {provider_name!r}. Supported: 'gemini', 'anthropic', 'openai'")

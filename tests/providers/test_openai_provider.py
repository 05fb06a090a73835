import asyncio
import unittest
from types import SimpleNamespace

import httpx
import openai

from chat_relay.errors import ModelInvocationError
from chat_relay.models import GenerationBudget, TranscriptEntry
from chat_relay.providers.openai_provider import OpenAIProvider, _to_openai_messages

_BUDGET = GenerationBudget(max_output_tokens=200, temperature=0.7, top_k=40, top_p=0.95)


class _FakeCompletions:
    def __init__(self, response=None, error: Exception | None = None):
        self._response = response
        self._error = error
        self.kwargs: dict = {}

    async def create(self, **kwargs):
        self.kwargs = kwargs
        if self._error is not None:
            raise self._error
        return self._response


class _FakeClient:
    def __init__(self, completions: _FakeCompletions):
        self.chat = SimpleNamespace(completions=completions)


class ToOpenAIMessagesTests(unittest.TestCase):
    def test_system_prompt_first_and_model_becomes_assistant(self) -> None:
        result = _to_openai_messages("You are helpful.", [TranscriptEntry("model", "earlier")], "now")
        self.assertEqual(["system", "assistant", "user"], [m["role"] for m in result])
        self.assertEqual("now", result[-1]["content"])

    def test_empty_system_prompt_is_omitted(self) -> None:
        result = _to_openai_messages("", [], "hello")
        self.assertEqual([{"role": "user", "content": "hello"}], result)


class OpenAIProviderTests(unittest.TestCase):
    def _make_provider(self, completions: _FakeCompletions) -> OpenAIProvider:
        provider = OpenAIProvider.__new__(OpenAIProvider)
        provider._client = _FakeClient(completions)
        return provider

    def test_generate_returns_first_choice(self) -> None:
        response = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content="Hi!"))])
        completions = _FakeCompletions(response=response)

        text = asyncio.run(self._make_provider(completions).generate("gpt-test", "sys", [], "hello", _BUDGET))

        self.assertEqual("Hi!", text)
        self.assertEqual(200, completions.kwargs["max_tokens"])
        self.assertEqual(0.95, completions.kwargs["top_p"])
        self.assertNotIn("top_k", completions.kwargs)

    def test_no_choices_gives_empty_text(self) -> None:
        completions = _FakeCompletions(response=SimpleNamespace(choices=[]))
        self.assertEqual("", asyncio.run(self._make_provider(completions).generate("m", "", [], "p", _BUDGET)))

    def test_rate_limit_is_wrapped_with_status(self) -> None:
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        error = openai.RateLimitError(
            "You exceeded your current quota",
            response=httpx.Response(429, request=request),
            body=None,
        )

        with self.assertRaises(ModelInvocationError) as ctx:
            asyncio.run(self._make_provider(_FakeCompletions(error=error)).generate("m", "", [], "p", _BUDGET))

        self.assertEqual(429, ctx.exception.status_code)
        self.assertIn("quota", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()

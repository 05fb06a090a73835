import asyncio

from chat_relay.models import Credentials, ErrorKind
from chat_relay.services.history_projector import HistoryProjector
from chat_relay.services.session_invoker import SessionInvoker
from tests.memory.base import ChatLogTestCase
from tests.services.fakes import FakeProvider

_KEY = Credentials(api_key="real-key-1234567890", env_var="GEMINI_API_KEY")
_NO_KEY = Credentials(api_key="", env_var="GEMINI_API_KEY")


class SessionInvokerTests(ChatLogTestCase):
    def _invoker(self, provider: FakeProvider, credentials: Credentials = _KEY) -> SessionInvoker:
        return SessionInvoker(
            credentials=credentials,
            projector=HistoryProjector(self._log),
            model="test-model",
            system_prompt="be brief",
            provider=provider,
        )

    def test_demo_reply_without_credential(self) -> None:
        provider = FakeProvider()
        result = asyncio.run(self._invoker(provider, _NO_KEY).invoke("u1", "hello"))

        self.assertTrue(result.success)
        self.assertTrue(result.is_demo)
        self.assertIn("hello", result.text)
        self.assertIn("GEMINI_API_KEY", result.text)
        self.assertEqual([], provider.calls)

    def test_placeholder_credential_means_demo(self) -> None:
        provider = FakeProvider()
        creds = Credentials(api_key="your_api_key_here", env_var="GEMINI_API_KEY")
        result = asyncio.run(self._invoker(provider, creds).invoke("u1", "hello"))
        self.assertTrue(result.is_demo)
        self.assertEqual([], provider.calls)

    def test_missing_provider_means_demo(self) -> None:
        invoker = SessionInvoker(
            credentials=_KEY,
            projector=HistoryProjector(self._log),
            model="m",
            system_prompt="",
        )
        self.assertTrue(invoker.demo_mode)
        self.assertTrue(asyncio.run(invoker.invoke("u1", "hi")).is_demo)

    def test_model_call_carries_history_prompt_and_budget(self) -> None:
        provider = FakeProvider(reply="  Tides follow the moon.  ")

        self._log.append("u1", "user", "hi")
        self._log.append("u1", "assistant", "hello")
        self._log.append("u1", "user", "Explain tides in detail")

        result = asyncio.run(self._invoker(provider).invoke("u1", "Explain tides in detail"))

        self.assertTrue(result.success)
        self.assertFalse(result.is_demo)
        self.assertEqual("Tides follow the moon.", result.text)
        self.assertEqual(1, len(provider.calls))
        call = provider.calls[0]
        self.assertEqual("test-model", call["model"])
        self.assertEqual("be brief", call["system_prompt"])
        self.assertEqual("Explain tides in detail", call["prompt"])
        self.assertEqual(["user", "model"], [e.role for e in call["transcript"]])
        self.assertEqual(400, call["budget"].max_output_tokens)

    def test_failure_is_classified(self) -> None:
        provider = FakeProvider(error=RuntimeError("429 quota exceeded"))

        result = asyncio.run(self._invoker(provider).invoke("u1", "hello"))

        self.assertFalse(result.success)
        self.assertEqual(ErrorKind.QUOTA_EXCEEDED, result.failure.kind)
        self.assertIn("quota has been exceeded", result.text)
        self.assertEqual(1, len(provider.calls))

    def test_empty_model_reply_is_a_failure(self) -> None:
        provider = FakeProvider(reply="   ")

        result = asyncio.run(self._invoker(provider).invoke("u1", "hello"))

        self.assertFalse(result.success)
        self.assertEqual(ErrorKind.UNKNOWN, result.failure.kind)
        self.assertIn("technical issue", result.text)
        self.assertNotIn("model configuration", result.text)

    def test_empty_model_reply_is_not_reported_as_model_unavailable(self) -> None:
        provider = FakeProvider(reply="")

        result = asyncio.run(self._invoker(provider).invoke("u1", "hello"))

        self.assertNotEqual(ErrorKind.MODEL_UNAVAILABLE, result.failure.kind)
        self.assertEqual("the reply came back empty", result.failure.raw_message)

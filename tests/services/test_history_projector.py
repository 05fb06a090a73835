import asyncio

from chat_relay.models import RecordOutcome, TranscriptEntry
from chat_relay.services.history_projector import HistoryProjector
from tests.memory.base import ChatLogTestCase


class HistoryProjectorTests(ChatLogTestCase):
    def setUp(self) -> None:
        super().setUp()
        self._projector = HistoryProjector(self._log)

    def _seed(self, turns: list[tuple[str, str]]) -> list[str]:
        return [self._log.append("u1", role, text).id for role, text in turns]

    def test_empty_thread_gives_empty_transcript(self) -> None:
        self.assertEqual([], asyncio.run(self._projector.project("u1")))

    def test_maps_roles_and_drops_last_turn(self) -> None:
        self._seed([("user", "hi"), ("assistant", "hello"), ("user", "how are you?")])

        transcript = asyncio.run(self._projector.project("u1"))

        self.assertEqual(
            [TranscriptEntry("user", "hi"), TranscriptEntry("model", "hello")],
            transcript,
        )

    def test_only_prompt_stored_gives_empty_transcript(self) -> None:
        self._seed([("user", "first message")])
        self.assertEqual([], asyncio.run(self._projector.project("u1")))

    def test_excludes_in_flight_turn_by_id(self) -> None:
        ids = self._seed([("user", "q1"), ("assistant", "a1"), ("user", "q2"), ("user", "q3 from another tab")])

        transcript = asyncio.run(self._projector.project("u1", RecordOutcome(turn_id=ids[2])))

        self.assertEqual(["q1", "a1", "q3 from another tab"], [e.content for e in transcript])

    def test_failed_record_excludes_nothing(self) -> None:
        self._seed([("user", "q1"), ("assistant", "a1")])

        transcript = asyncio.run(self._projector.project("u1", RecordOutcome(error="disk full")))

        self.assertEqual(["q1", "a1"], [e.content for e in transcript])

    def test_prompt_never_appears_twice(self) -> None:
        ids = self._seed([("user", "q1"), ("assistant", "a1"), ("user", "same question")])

        transcript = asyncio.run(self._projector.project("u1", RecordOutcome(turn_id=ids[-1])))

        self.assertNotIn("same question", [e.content for e in transcript])

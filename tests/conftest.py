import json
import pytest

from examenbuddy.catalog import get_subject
from examenbuddy.errors import ModelCallError, StreamError
from examenbuddy.models import UserProfile
from examenbuddy.services.practice_session import PracticeSessionController


class FakeModelClient:
    """Scripted stand-in for GeminiClient: hands out queued replies in order."""

    def __init__(self, json_replies=None, text_replies=None, stream_chunks=None, stream_error_after=None):
        self.json_replies = list(json_replies or [])
        self.text_replies = list(text_replies or [])
        self.stream_chunks = list(stream_chunks or [])
        self.stream_error_after = stream_error_after
        self.json_calls = []
        self.text_calls = []
        self.stream_calls = []

    def _next(self, queue):
        if not queue:
            raise ModelCallError("no scripted reply left")
        reply = queue.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def generate_json(self, contents, *, system_instruction, response_schema, session_id=None):
        self.json_calls.append({"contents": contents, "system_instruction": system_instruction, "schema": response_schema})
        return self._next(self.json_replies)

    def generate_text(self, contents, *, system_instruction, session_id=None):
        self.text_calls.append({"contents": contents, "system_instruction": system_instruction})
        return self._next(self.text_replies)

    def stream_text(self, contents, *, system_instruction):
        self.stream_calls.append({"contents": contents, "system_instruction": system_instruction})
        for idx, chunk in enumerate(self.stream_chunks):
            if self.stream_error_after is not None and idx == self.stream_error_after:
                raise StreamError("connection reset")
            yield chunk
        if self.stream_error_after is not None and self.stream_error_after >= len(self.stream_chunks):
            raise StreamError("connection reset")


def turn_json(question="Wat is prijselasticiteit?", topic="Markt", score=None, difficulty="gemiddeld"):
    payload = {
        "nextQuestion": {
            "text": question,
            "topic": topic,
            "difficulty": difficulty,
            "hint": "Denk aan procentuele veranderingen.",
        }
    }
    if score is not None:
        payload["feedback"] = {
            "isCorrect": score >= 6,
            "score": score,
            "explanation": "Uitleg bij je antwoord.",
            "modelAnswer": "Het modelantwoord.",
        }
    return json.dumps(payload)


@pytest.fixture
def profile():
    return UserProfile(name="Mila", level="havo", year=4)


@pytest.fixture
def economie():
    return get_subject("economie")


@pytest.fixture
def make_controller():
    def _make(client, passing_score=6):
        return PracticeSessionController(client, passing_score=passing_score)
    return _make

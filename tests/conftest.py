import json

import pytest
from fastapi.testclient import TestClient

from smarthomework import sessions
from smarthomework.gemini_client import get_gemini_client
from smarthomework.main import app
from smarthomework.models import Assignment, Question, QuestionType


class FakeGeminiClient:
    """Stands in for GeminiClient; replays queued responses in order."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def queue(self, *responses):
        self.responses.extend(responses)

    async def generate_json(self, prompt, schema, *, temperature=None):
        self.calls.append({"prompt": prompt, "schema": schema, "temperature": temperature})
        if not self.responses:
            raise RuntimeError("no fake response queued")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        if isinstance(item, (dict, list)):
            return json.dumps(item, ensure_ascii=False)
        return item

    async def aclose(self):
        pass


def make_assignment(n=4, assignment_id="a1"):
    questions = []
    for i in range(n):
        if i % 2 == 0:
            questions.append(
                Question(
                    id=f"q{i + 1}",
                    type=QuestionType.MCQ,
                    content=f"Câu {i + 1}: $x + {i} = ?$",
                    options=["x", "y", "z", "w"],
                    correct_answer="B",
                )
            )
        else:
            questions.append(
                Question(
                    id=f"q{i + 1}",
                    type=QuestionType.TRUE_FALSE,
                    content=f"Câu {i + 1} đúng hay sai?",
                    correct_answer="Đúng",
                )
            )
    return Assignment(
        id=assignment_id,
        title="Bài tập Toán học - Hàm số",
        subject="Toán học",
        grade="10",
        topic="Hàm số",
        questions=questions,
    )


@pytest.fixture
def assignment():
    return make_assignment()


@pytest.fixture
def fake_ai():
    return FakeGeminiClient()


@pytest.fixture
def client(fake_ai):
    sessions.reset()
    app.dependency_overrides[get_gemini_client] = lambda: fake_ai
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    sessions.reset()

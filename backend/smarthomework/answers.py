"""Per-session answer store: question id -> raw answer token."""

from __future__ import annotations
from typing import Dict, Optional


class AnswerStore:
    """Absence of a key means "unanswered"; empty answers are never stored."""

    def __init__(self) -> None:
        self._answers: Dict[str, str] = {}

    def set_answer(self, question_id: str, value: Optional[str]) -> None:
        if value is None or not str(value).strip():
            self._answers.pop(question_id, None)
            return
        self._answers[question_id] = str(value)

    def get_answer(self, question_id: str) -> Optional[str]:
        return self._answers.get(question_id)

    def is_answered(self, question_id: str) -> bool:
        return question_id in self._answers

    def count_answered(self) -> int:
        return len(self._answers)

    def snapshot(self) -> Dict[str, str]:
        return dict(self._answers)

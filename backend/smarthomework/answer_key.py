from __future__ import annotations
import string
from typing import Dict, List, Mapping, Optional

from .models import Assignment, Question, QuestionType

OPTION_LETTERS: List[str] = ["A", "B", "C", "D"]


def option_letters(count: int) -> List[str]:
    """Ordinal -> letter mapping for ``count`` options (A, B, C, ...)."""
    if count <= len(OPTION_LETTERS):
        return OPTION_LETTERS[:max(count, 0)]
    return list(string.ascii_uppercase[:count])


def resolve_display_text(question: Question, token: Optional[str]) -> Optional[str]:
    if not token:
        return None
    if question.type != QuestionType.MCQ or not question.options:
        return token
    letters = option_letters(max(len(question.options), len(OPTION_LETTERS)))
    key = token.strip().upper()
    if key in letters:
        idx = letters.index(key)
        if idx < len(question.options) and question.options[idx]:
            return question.options[idx]
    return token


def is_objectively_correct(question: Question, token: Optional[str]) -> Optional[bool]:
    """Raw-token comparison for MCQ / true-false; None for free-text questions."""
    if question.type not in (QuestionType.MCQ, QuestionType.TRUE_FALSE):
        return None
    if not token or not question.correct_answer:
        return False
    if question.type == QuestionType.MCQ:
        return token.strip().upper() == question.correct_answer.strip().upper()
    return token.strip() == question.correct_answer.strip()


def mark_answers(assignment: Assignment, answers: Mapping[str, str]) -> Dict[str, Optional[bool]]:
    """Right/wrong flag per question id; None where only the AI grade applies."""
    return {q.id: is_objectively_correct(q, answers.get(q.id)) for q in assignment.questions}

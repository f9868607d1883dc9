"""Boundary parsing for Gemini JSON responses.

Everything the model returns is treated as untrusted: the outermost JSON
object is cut out of the raw text, then coerced into typed models with
lenient defaults. Nothing downstream looks at the raw dicts.
"""

from __future__ import annotations
import json
import logging
import math
import time
import uuid
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .models import Chapter, Question, QuestionType

logger = logging.getLogger(__name__)

MAX_QUESTION_SCORE = 10.0


def extract_json_object(text: Optional[str]) -> Dict[str, Any]:
    """Return the outermost ``{...}`` span of ``text`` parsed as a dict.

    Raises ValueError when no JSON object can be recovered.
    """
    if not text:
        raise ValueError("empty model response")
    first = text.find("{")
    last = text.rfind("}")
    if first != -1 and last != -1 and last > first:
        candidate = text[first : last + 1]
    else:
        candidate = text.replace("```json", "").replace("```", "").strip()
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as err:
        raise ValueError(f"model response is not valid JSON: {err}") from err
    if not isinstance(data, dict):
        raise ValueError("model response is not a JSON object")
    return data


def new_question_id(prefix: str = "q") -> str:
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


class RawAssessment(BaseModel):
    questionId: str = ""
    score: float = 0.0
    feedback: str = ""

    @field_validator("questionId", "feedback", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return _as_text(v)

    @field_validator("score", mode="before")
    @classmethod
    def _score(cls, v: Any) -> float:
        if isinstance(v, bool):
            return 0.0
        try:
            value = float(v)
        except (TypeError, ValueError):
            return 0.0
        if math.isnan(value) or math.isinf(value):
            return 0.0
        return min(max(value, 0.0), MAX_QUESTION_SCORE)


class GradingPayload(BaseModel):
    assessments: List[RawAssessment] = Field(default_factory=list)
    overallComment: str = ""

    @field_validator("assessments", mode="before")
    @classmethod
    def _items(cls, v: Any) -> List[Any]:
        if not isinstance(v, list):
            return []
        return [item for item in v if isinstance(item, dict)]

    @field_validator("overallComment", mode="before")
    @classmethod
    def _comment(cls, v: Any) -> str:
        return _as_text(v)


def parse_grading_payload(data: Dict[str, Any]) -> GradingPayload:
    return GradingPayload.model_validate(data)


class RawQuestion(BaseModel):
    type: QuestionType
    content: str
    options: List[str] = Field(default_factory=list)
    correctAnswer: str = ""
    imageSvg: Optional[str] = None

    @field_validator("type", mode="before")
    @classmethod
    def _type(cls, v: Any) -> Any:
        return _as_text(v).upper().replace("-", "_").replace(" ", "_")

    @field_validator("content", "correctAnswer", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return _as_text(v)

    @field_validator("options", mode="before")
    @classmethod
    def _options(cls, v: Any) -> List[str]:
        if not isinstance(v, list):
            return []
        return [_as_text(o) for o in v]

    def to_question(self) -> Question:
        is_mcq = self.type == QuestionType.MCQ
        return Question(
            id=new_question_id(),
            type=self.type,
            content=self.content,
            options=self.options if is_mcq and self.options else None,
            correct_answer=self.correctAnswer or None,
            image_svg=self.imageSvg or None,
        )


def parse_questions(data: Dict[str, Any]) -> List[Question]:
    """Coerce ``{"questions": [...]}``; malformed entries are dropped, ids are regenerated."""
    raw_items = data.get("questions")
    if not isinstance(raw_items, list):
        return []
    questions: List[Question] = []
    for i, item in enumerate(raw_items):
        if not isinstance(item, dict):
            continue
        try:
            raw = RawQuestion.model_validate(item)
        except ValidationError as err:
            logger.warning("Dropping malformed question %d: %s", i + 1, err.errors()[0].get("msg"))
            continue
        if not raw.content:
            continue
        questions.append(raw.to_question())
    return questions


def parse_chapters(data: Dict[str, Any]) -> List[Chapter]:
    raw_items = data.get("chapters")
    if not isinstance(raw_items, list):
        return []
    chapters: List[Chapter] = []
    for item in raw_items:
        if not isinstance(item, dict):
            continue
        title = _as_text(item.get("title"))
        if not title:
            continue
        lessons = item.get("lessons")
        lessons = [_as_text(l) for l in lessons if _as_text(l)] if isinstance(lessons, list) else []
        chapters.append(Chapter(title=title, lessons=lessons))
    return chapters

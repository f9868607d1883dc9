from __future__ import annotations
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class QuestionType(str, Enum):
	MCQ = "MCQ"
	TRUE_FALSE = "TRUE_FALSE"
	SHORT_ANSWER = "SHORT_ANSWER"
	ESSAY = "ESSAY"


# Correct-answer tokens for TRUE_FALSE questions
TRUE_TOKEN = "Đúng"
FALSE_TOKEN = "Sai"

TOTAL_SCORE = 10


def _utcnow() -> datetime:
	return datetime.now(timezone.utc)


def _read_only(v: Mapping[str, Any]) -> Mapping[str, Any]:
	# Answer and feedback maps of submitted records cannot be edited in place
	return MappingProxyType(dict(v))


class Question(BaseModel):
	model_config = ConfigDict(frozen=True)

	id: str
	type: QuestionType
	content: str
	# Only MCQ questions carry options
	options: Optional[List[str]] = None
	correct_answer: Optional[str] = None
	image_svg: Optional[str] = None


class Assignment(BaseModel):
	model_config = ConfigDict(frozen=True)

	id: str
	title: str
	subject: str
	grade: str
	topic: str
	questions: List[Question]
	created_at: datetime = Field(default_factory=_utcnow)

	def question_ids(self) -> List[str]:
		return [q.id for q in self.questions]

	def find_question(self, question_id: str) -> Optional[Question]:
		for q in self.questions:
			if q.id == question_id:
				return q
		return None


class Submission(BaseModel):
	model_config = ConfigDict(frozen=True)

	assignment_id: str
	student_name: str
	student_class: str
	answers: Mapping[str, str]
	submitted_at: datetime = Field(default_factory=_utcnow)

	@field_validator("answers", mode="after")
	@classmethod
	def _freeze_answers(cls, v: Mapping[str, str]) -> Mapping[str, str]:
		return _read_only(v)

	@field_serializer("answers")
	def _dump_answers(self, v: Mapping[str, str]) -> Dict[str, str]:
		return dict(v)


class GradingResult(BaseModel):
	model_config = ConfigDict(frozen=True)

	score: float
	total_score: int = TOTAL_SCORE
	feedback: Mapping[str, str]
	overall_comment: str

	@field_validator("feedback", mode="after")
	@classmethod
	def _freeze_feedback(cls, v: Mapping[str, str]) -> Mapping[str, str]:
		return _read_only(v)

	@field_serializer("feedback")
	def _dump_feedback(self, v: Mapping[str, str]) -> Dict[str, str]:
		return dict(v)


class Chapter(BaseModel):
	title: str
	lessons: List[str] = Field(default_factory=list)


class GenerationConfig(BaseModel):
	type: QuestionType
	difficulty: str = "Hiểu"
	count: int = 0

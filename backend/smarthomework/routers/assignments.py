from __future__ import annotations
import uuid
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel, Field

from ..documents import extract_text
from ..errors import EmptyConfiguration
from ..gemini_client import GeminiClient, get_gemini_client
from ..generation import (
	analyze_curriculum,
	assignment_topic,
	generate_questions,
	generation_topic,
	parse_uploaded_content,
	standard_curriculum,
)
from ..models import Assignment, Chapter, GenerationConfig, Question
from ..sessions import get_assignment, save_assignment
from ..settings import settings

router = APIRouter(prefix="/assignments", tags=["assignments"])


class GenerateRequest(BaseModel):
	subject: str = "Toán học"
	grade: str = "10"
	topic: str = ""
	chapter: str = ""
	lesson: str = ""
	configs: List[GenerationConfig] = Field(default_factory=list)
	# Extracted text of an uploaded textbook, if any
	context_material: Optional[str] = None


class ParseRequest(BaseModel):
	text: str


class CurriculumRequest(BaseModel):
	subject: str
	grade: str
	book_series: str = "Kết nối tri thức với cuộc sống"


class CreateAssignmentRequest(BaseModel):
	subject: str
	grade: str
	topic: str = ""
	chapter: str = ""
	lesson: str = ""
	questions: List[Question]


def share_url(assignment: Assignment) -> str:
	return f"{settings.public_base_url.rstrip('/')}/#exam={assignment.id}"


def student_view(assignment: Assignment) -> Dict[str, Any]:
	# Correct answers stay on the server
	return {
		"id": assignment.id,
		"title": assignment.title,
		"subject": assignment.subject,
		"grade": assignment.grade,
		"topic": assignment.topic,
		"created_at": assignment.created_at,
		"questions": [q.model_dump(exclude={"correct_answer"}) for q in assignment.questions],
	}


@router.post("/generate")
async def generate(req: GenerateRequest, client: GeminiClient = Depends(get_gemini_client)):
	topic = generation_topic(req.topic, req.chapter, req.lesson)
	questions = await generate_questions(
		client, req.subject, req.grade, topic, req.configs, req.context_material
	)
	return {"topic": topic, "questions": questions}


@router.post("/parse")
async def parse_text(req: ParseRequest, client: GeminiClient = Depends(get_gemini_client)):
	questions = await parse_uploaded_content(client, req.text)
	return {"questions": questions}


@router.post("/parse/file")
async def parse_file(file: UploadFile = File(...)):
	content = await file.read()
	return {"filename": file.filename, "text": extract_text(file.filename or "", content)}


@router.post("/context")
async def upload_context(file: UploadFile = File(...), client: GeminiClient = Depends(get_gemini_client)):
	content = await file.read()
	text = extract_text(file.filename or "", content)
	chapters: List[Chapter] = await analyze_curriculum(client, text)
	return {"filename": file.filename, "content": text, "chapters": chapters}


@router.post("/curriculum")
async def curriculum(req: CurriculumRequest, client: GeminiClient = Depends(get_gemini_client)):
	chapters = await standard_curriculum(client, req.subject, req.grade, req.book_series)
	return {"chapters": chapters}


@router.post("", status_code=201)
async def create_assignment(req: CreateAssignmentRequest):
	if not req.questions:
		raise EmptyConfiguration("An assignment needs at least one question")
	ids = [q.id for q in req.questions]
	if len(set(ids)) != len(ids):
		raise HTTPException(status_code=400, detail="question ids must be unique")
	topic = assignment_topic(req.topic, req.chapter, req.lesson)
	assignment = save_assignment(
		Assignment(
			id=str(uuid.uuid4()),
			title=f"Bài tập {req.subject} - {topic}",
			subject=req.subject,
			grade=req.grade,
			topic=topic,
			questions=req.questions,
		)
	)
	return {"assignment": assignment, "share_url": share_url(assignment)}


@router.get("/{assignment_id}")
async def read_assignment(assignment_id: str, include_answers: bool = False):
	assignment = get_assignment(assignment_id)
	if include_answers:
		return assignment
	return student_view(assignment)

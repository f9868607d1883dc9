from __future__ import annotations
from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel, field_validator

from .. import sessions
from ..settings import settings

router = APIRouter(prefix="/exam", tags=["exam"])


class LoginRequest(BaseModel):
    assignment_id: str
    student_name: str
    student_class: str

    @field_validator("student_name", "student_class")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class AnswerRequest(BaseModel):
    value: Optional[str] = None


class JumpRequest(BaseModel):
    index: int


@router.post("/sessions", status_code=201)
async def start_session(req: LoginRequest):
    assignment = sessions.get_assignment(req.assignment_id)
    session = sessions.open_session(
        assignment,
        req.student_name,
        req.student_class,
        duration_seconds=settings.exam_duration_seconds,
    )
    return session.state()


@router.get("/sessions/{session_id}")
async def get_state(session_id: str):
    return sessions.get_session(session_id).state()


@router.put("/sessions/{session_id}/answers/{question_id}")
async def set_answer(session_id: str, question_id: str, req: AnswerRequest):
    session = sessions.get_session(session_id)
    session.set_answer(question_id, req.value)
    return {
        "question_id": question_id,
        "answer": session.answers.get_answer(question_id),
        "answered": session.answers.count_answered(),
    }


@router.post("/sessions/{session_id}/next")
async def next_question(session_id: str):
    session = sessions.get_session(session_id)
    session.navigator.next()
    return session.navigator.describe()


@router.post("/sessions/{session_id}/prev")
async def prev_question(session_id: str):
    session = sessions.get_session(session_id)
    session.navigator.prev()
    return session.navigator.describe()


@router.post("/sessions/{session_id}/jump")
async def jump(session_id: str, req: JumpRequest):
    session = sessions.get_session(session_id)
    session.navigator.jump_to(req.index)
    return session.navigator.describe()


@router.post("/sessions/{session_id}/review")
async def review(session_id: str):
    session = sessions.get_session(session_id)
    session.navigator.enter_review()
    return session.navigator.describe()


@router.get("/sessions/{session_id}/summary")
async def summary(session_id: str):
    return sessions.get_session(session_id).summary()


@router.post("/sessions/{session_id}/submit")
async def submit(session_id: str):
    session = sessions.get_session(session_id)
    return session.submit()


@router.delete("/sessions/{session_id}", status_code=204)
async def end_session(session_id: str):
    sessions.close_session(session_id)

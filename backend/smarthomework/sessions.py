"""In-memory exam sessions.

Every mutation happens on the server's event loop, so a session is never
touched by two requests at the same time. State is lost on restart.
"""

from __future__ import annotations
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .answer_key import resolve_display_text
from .answers import AnswerStore
from .errors import (
    AssignmentNotFound,
    GradingInProgress,
    NotSubmitted,
    QuestionNotFound,
    SessionNotFound,
    SubmissionClosed,
)
from .grading import grade_submission
from .models import Assignment, GradingResult, Submission
from .navigation import ExamNavigator
from .submission import build_submission
from .timer import CountdownTimer

logger = logging.getLogger(__name__)


class ExamSession:
    def __init__(
        self,
        session_id: str,
        assignment: Assignment,
        student_name: str,
        student_class: str,
        *,
        duration_seconds: int,
    ) -> None:
        self.session_id = session_id
        self.assignment = assignment
        self.student_name = student_name
        self.student_class = student_class
        self.created_at = datetime.now(timezone.utc)
        self.answers = AnswerStore()
        self.navigator = ExamNavigator(len(assignment.questions))
        self.timer = CountdownTimer(duration_seconds)
        self.submission: Optional[Submission] = None
        self.result: Optional[GradingResult] = None
        self.grading = False
        self.last_error: Optional[str] = None

    @property
    def submitted(self) -> bool:
        return self.submission is not None

    def set_answer(self, question_id: str, value: Optional[str]) -> None:
        if self.submitted:
            raise SubmissionClosed("This exam has already been submitted")
        if self.assignment.find_question(question_id) is None:
            raise QuestionNotFound(f"Question {question_id} is not part of this assignment")
        self.answers.set_answer(question_id, value)

    def summary(self) -> Dict[str, Any]:
        total = len(self.assignment.questions)
        answered = sum(1 for q in self.assignment.questions if self.answers.is_answered(q.id))
        items: List[Dict[str, Any]] = []
        for number, q in enumerate(self.assignment.questions, start=1):
            token = self.answers.get_answer(q.id)
            items.append(
                {
                    "number": number,
                    "question_id": q.id,
                    "answered": token is not None,
                    "answer": token,
                    "display": resolve_display_text(q, token),
                }
            )
        return {"total": total, "answered": answered, "unanswered": total - answered, "items": items}

    def submit(self) -> Submission:
        if self.submitted:
            raise SubmissionClosed("This exam has already been submitted")
        self.submission = build_submission(self.assignment, self.student_name, self.student_class, self.answers)
        self.timer.cancel()
        logger.info(
            "Session %s submitted %d/%d answers",
            self.session_id,
            self.answers.count_answered(),
            len(self.assignment.questions),
        )
        return self.submission

    async def grade(self, client) -> GradingResult:
        if self.submission is None:
            raise NotSubmitted("Submit the exam before grading")
        if self.result is not None:
            return self.result
        if self.grading:
            raise GradingInProgress("Grading is already in progress for this submission")
        self.grading = True
        self.last_error = None
        try:
            self.result = await grade_submission(client, self.assignment, self.submission)
        except Exception as err:
            self.last_error = str(err)
            raise
        finally:
            self.grading = False
        return self.result

    def close(self) -> None:
        self.timer.cancel()

    def state(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "assignment_id": self.assignment.id,
            "student_name": self.student_name,
            "student_class": self.student_class,
            "navigation": self.navigator.describe(),
            "answers": self.answers.snapshot(),
            "answered": self.answers.count_answered(),
            "total": len(self.assignment.questions),
            "time_left_seconds": self.timer.remaining,
            "time_left": self.timer.format(),
            "expired": self.timer.expired,
            "submitted": self.submitted,
            "grading": self.grading,
            "graded": self.result is not None,
        }


_assignments: Dict[str, Assignment] = {}
_sessions: Dict[str, ExamSession] = {}


def save_assignment(assignment: Assignment) -> Assignment:
    _assignments[assignment.id] = assignment
    return assignment


def get_assignment(assignment_id: str) -> Assignment:
    assignment = _assignments.get(assignment_id)
    if assignment is None:
        raise AssignmentNotFound("Assignment not found")
    return assignment


def open_session(assignment: Assignment, student_name: str, student_class: str, *, duration_seconds: int) -> ExamSession:
    """Create a session and start its countdown; must run inside the event loop."""
    session = ExamSession(
        uuid.uuid4().hex,
        assignment,
        student_name,
        student_class,
        duration_seconds=duration_seconds,
    )
    session.timer.start()
    _sessions[session.session_id] = session
    logger.info("Opened exam session %s for %s (%s)", session.session_id, student_name, student_class)
    return session


def get_session(session_id: str) -> ExamSession:
    session = _sessions.get(session_id)
    if session is None:
        raise SessionNotFound("Session not found")
    return session


def close_session(session_id: str) -> None:
    session = _sessions.pop(session_id, None)
    if session is None:
        raise SessionNotFound("Session not found")
    session.close()


def all_sessions() -> List[ExamSession]:
    return list(_sessions.values())


def reset() -> None:
    for session in _sessions.values():
        session.close()
    _sessions.clear()
    _assignments.clear()

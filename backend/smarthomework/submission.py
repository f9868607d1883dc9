from __future__ import annotations
from datetime import datetime, timezone

from .answers import AnswerStore
from .models import Assignment, Submission


def build_submission(assignment: Assignment, student_name: str, student_class: str, answers: AnswerStore) -> Submission:
    return Submission(
        assignment_id=assignment.id,
        student_name=student_name,
        student_class=student_class,
        answers=answers.snapshot(),
        submitted_at=datetime.now(timezone.utc),
    )

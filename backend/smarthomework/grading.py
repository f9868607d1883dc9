from __future__ import annotations
import json
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict

from .errors import GradingFailed
from .models import Assignment, GradingResult, Submission, TOTAL_SCORE
from .responses import GradingPayload, extract_json_object, parse_grading_payload

logger = logging.getLogger(__name__)

EMPTY_FEEDBACK = "Không có nhận xét."
MISSING_ASSESSMENT = "Chưa có đánh giá (Lỗi hệ thống hoặc bỏ qua)."
DEFAULT_OVERALL_COMMENT = "Đã hoàn thành bài tập."

POINTS_PER_QUESTION = 10

GRADING_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "assessments": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "questionId": {"type": "STRING"},
                    "score": {"type": "NUMBER", "description": "Score from 0 to 10"},
                    "feedback": {"type": "STRING", "description": "Detailed feedback in Vietnamese"},
                },
                "required": ["questionId", "score", "feedback"],
            },
        },
        "overallComment": {"type": "STRING"},
    },
    "required": ["assessments", "overallComment"],
}


def _build_grading_prompt(assignment: Assignment, submission: Submission) -> str:
    reference = [
        {"id": q.id, "type": q.type.value, "content": q.content, "correct": q.correct_answer}
        for q in assignment.questions
    ]
    return (
        "Act as a strict but encouraging teacher. Grade the following student submission.\n\n"
        f"Assignment Context: {assignment.subject} - {assignment.topic} (Grade {assignment.grade}).\n\n"
        "Questions Reference (with Correct Answers):\n"
        f"{json.dumps(reference, ensure_ascii=False)}\n\n"
        "Student Answers (Map of Question ID -> Answer):\n"
        f"{json.dumps(dict(submission.answers), ensure_ascii=False)}\n\n"
        "Instructions:\n"
        "1. Iterate through every provided Question ID.\n"
        "2. For MCQ and True/False, strictly check against the correct answer key.\n"
        "3. For Short Answer, check for semantic correctness (fuzzy match allowed).\n"
        "4. For Essay, evaluate understanding, logic, and completeness.\n"
        "5. Provide a score (0-10) for each question.\n"
        "6. Provide constructive feedback in Vietnamese for each question.\n"
        "7. Provide an overall encouraging comment for the whole assignment."
    )


def _one_decimal(value: float) -> float:
    # Halves round up, on the exact binary value
    return float(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def reduce_assessments(assignment: Assignment, payload: GradingPayload) -> GradingResult:
    known_ids = set(assignment.question_ids())
    feedback: Dict[str, str] = {}
    earned = 0.0
    for item in payload.assessments:
        if not item.questionId or item.questionId not in known_ids:
            continue
        feedback[item.questionId] = item.feedback or EMPTY_FEEDBACK
        earned += item.score

    for qid in assignment.question_ids():
        if qid not in feedback:
            feedback[qid] = MISSING_ASSESSMENT

    max_score = len(assignment.questions) * POINTS_PER_QUESTION
    normalized = _one_decimal(earned / max_score * TOTAL_SCORE) if max_score > 0 else 0.0

    return GradingResult(
        score=normalized,
        total_score=TOTAL_SCORE,
        feedback=feedback,
        overall_comment=payload.overallComment or DEFAULT_OVERALL_COMMENT,
    )


async def grade_submission(client, assignment: Assignment, submission: Submission) -> GradingResult:
    prompt = _build_grading_prompt(assignment, submission)
    try:
        raw = await client.generate_json(prompt, GRADING_SCHEMA)
        payload = parse_grading_payload(extract_json_object(raw))
    except Exception as err:
        logger.exception("Grading failed for assignment %s", assignment.id)
        raise GradingFailed(f"AI Grading failed: {err}") from err
    result = reduce_assessments(assignment, payload)
    logger.info(
        "Graded %s for %s: %s/%s",
        assignment.id,
        submission.student_name,
        result.score,
        result.total_score,
    )
    return result

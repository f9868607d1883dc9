from __future__ import annotations
from typing import Dict, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse, Response

from .. import sessions
from ..answer_key import mark_answers
from ..export import XLSX_MEDIA_TYPE, build_results_workbook, export_filename, results_summary_text
from ..gemini_client import GeminiClient, get_gemini_client

router = APIRouter(prefix="/results", tags=["results"])


def _graded(session_id: str) -> sessions.ExamSession:
	session = sessions.get_session(session_id)
	if session.result is None or session.submission is None:
		raise HTTPException(status_code=404, detail="No grading result yet")
	return session


def _marks(session: sessions.ExamSession) -> Optional[Dict[str, Optional[bool]]]:
	if session.submission is None:
		return None
	return mark_answers(session.assignment, session.submission.answers)


@router.post("/{session_id}/grade")
async def grade(session_id: str, client: GeminiClient = Depends(get_gemini_client)):
	session = sessions.get_session(session_id)
	result = await session.grade(client)
	return {"submission": session.submission, "result": result, "correct": _marks(session)}


@router.get("/{session_id}")
async def get_result(session_id: str):
	session = sessions.get_session(session_id)
	return {
		"submitted": session.submitted,
		"grading": session.grading,
		"error": session.last_error,
		"submission": session.submission,
		"result": session.result,
		"correct": _marks(session),
	}


@router.get("/{session_id}/export")
async def export_xlsx(session_id: str):
	session = _graded(session_id)
	content = build_results_workbook(session.assignment, session.submission, session.result)
	filename = export_filename(session.submission)
	return Response(
		content=content,
		media_type=XLSX_MEDIA_TYPE,
		headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"},
	)


@router.get("/{session_id}/summary.txt", response_class=PlainTextResponse)
async def summary_text(session_id: str):
	session = _graded(session_id)
	return results_summary_text(session.assignment, session.submission, session.result)

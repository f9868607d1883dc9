from __future__ import annotations


class HomeworkError(Exception):
	status_code = 500

	def __init__(self, detail: str) -> None:
		super().__init__(detail)
		self.detail = detail


class GenerationFailed(HomeworkError):
	status_code = 502


class GradingFailed(HomeworkError):
	status_code = 502


class FileReadFailed(HomeworkError):
	status_code = 422


class EmptyConfiguration(HomeworkError):
	status_code = 400


class InvalidQuestionIndex(HomeworkError):
	status_code = 400


class AssignmentNotFound(HomeworkError):
	status_code = 404


class SessionNotFound(HomeworkError):
	status_code = 404


class SubmissionClosed(HomeworkError):
	status_code = 409


class GradingInProgress(HomeworkError):
	status_code = 409


class QuestionNotFound(HomeworkError):
	status_code = 404


class NotSubmitted(HomeworkError):
	status_code = 409

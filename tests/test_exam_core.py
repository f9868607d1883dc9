import asyncio

import pytest

from conftest import make_assignment
from smarthomework.answer_key import is_objectively_correct, mark_answers, option_letters, resolve_display_text
from smarthomework.answers import AnswerStore
from smarthomework.errors import InvalidQuestionIndex
from smarthomework.models import GradingResult, Question, QuestionType
from smarthomework.navigation import Answering, ExamNavigator, Reviewing
from smarthomework.submission import build_submission
from smarthomework.timer import CountdownTimer, format_clock


def _mcq(**kwargs):
    data = dict(id="m1", type=QuestionType.MCQ, content="?", options=["x", "y", "z", "w"], correct_answer="B")
    data.update(kwargs)
    return Question(**data)


# --- answer store -----------------------------------------------------------

def test_answer_store_overwrites_and_counts():
    store = AnswerStore()
    store.set_answer("q1", "A")
    store.set_answer("q1", "C")
    store.set_answer("q2", "Đúng")
    assert store.get_answer("q1") == "C"
    assert store.count_answered() == 2
    assert store.is_answered("q2")
    assert store.get_answer("q3") is None


def test_answer_store_empty_value_means_unanswered():
    store = AnswerStore()
    store.set_answer("q1", "A")
    store.set_answer("q1", "   ")
    store.set_answer("q2", "")
    store.set_answer("q3", None)
    assert store.count_answered() == 0
    assert not store.is_answered("q1")


# --- navigation -------------------------------------------------------------

def test_next_walks_into_review():
    nav = ExamNavigator(3)
    assert nav.state == Answering(0)
    assert [nav.next(), nav.next(), nav.next()] == [Answering(1), Answering(2), Reviewing()]
    assert nav.jump_to(1) == Answering(1)


def test_prev_leaves_review_at_last_index():
    nav = ExamNavigator(3)
    nav.jump_to(1)
    nav.enter_review()
    assert nav.prev() == Answering(1)
    assert nav.prev() == Answering(0)
    assert nav.prev() == Answering(0)


def test_next_while_reviewing_is_noop():
    nav = ExamNavigator(2)
    nav.enter_review()
    assert nav.next() == Reviewing()


def test_jump_out_of_range_keeps_state():
    nav = ExamNavigator(3)
    nav.next()
    with pytest.raises(InvalidQuestionIndex):
        nav.jump_to(3)
    with pytest.raises(InvalidQuestionIndex):
        nav.jump_to(-1)
    assert nav.state == Answering(1)


def test_single_question_next_goes_to_review():
    nav = ExamNavigator(1)
    assert nav.next() == Reviewing()
    assert nav.describe()["is_last"] is True


# --- timer ------------------------------------------------------------------

def test_format_clock():
    assert format_clock(2700) == "45:00"
    assert format_clock(61) == "01:01"
    assert format_clock(0) == "00:00"
    assert format_clock(-5) == "00:00"


def test_tick_clamps_at_zero():
    timer = CountdownTimer(2)
    assert timer.tick() == 1
    assert timer.tick() == 0
    assert timer.tick() == 0
    assert timer.expired
    assert timer.format() == "00:00"


def test_timer_runs_down_and_stops():
    async def run():
        timer = CountdownTimer(3, tick_seconds=0.01)
        timer.start()
        await asyncio.sleep(0.3)
        return timer

    timer = asyncio.run(run())
    assert timer.remaining == 0
    assert timer.expired
    assert not timer.running


def test_timer_cancel_releases_tick():
    async def run():
        timer = CountdownTimer(1000, tick_seconds=0.01)
        timer.start()
        await asyncio.sleep(0.05)
        timer.cancel()
        frozen = timer.remaining
        await asyncio.sleep(0.05)
        return timer, frozen

    timer, frozen = asyncio.run(run())
    assert timer.remaining == frozen
    assert frozen < 1000
    assert not timer.running


# --- submission -------------------------------------------------------------

def test_submission_is_isolated_from_later_edits():
    assignment = make_assignment(2)
    store = AnswerStore()
    store.set_answer("q1", "B")
    submission = build_submission(assignment, "Nguyễn Văn A", "10A1", store)
    store.set_answer("q1", "C")
    store.set_answer("q2", "Sai")
    assert submission.answers == {"q1": "B"}
    assert submission.assignment_id == assignment.id
    assert submission.student_class == "10A1"


def test_submission_with_no_answers():
    submission = build_submission(make_assignment(2), "A", "B", AnswerStore())
    assert submission.answers == {}


def test_submission_answers_are_read_only():
    store = AnswerStore()
    store.set_answer("q1", "B")
    submission = build_submission(make_assignment(2), "A", "10A1", store)
    with pytest.raises(TypeError):
        submission.answers["q1"] = "C"
    assert submission.answers["q1"] == "B"
    assert submission.model_dump(mode="json")["answers"] == {"q1": "B"}


def test_grading_result_feedback_is_read_only():
    result = GradingResult(score=5.0, feedback={"q1": "ok"}, overall_comment="Tốt")
    with pytest.raises(TypeError):
        result.feedback["q1"] = "changed"
    assert result.model_dump()["feedback"] == {"q1": "ok"}


# --- answer key -------------------------------------------------------------

def test_resolve_letter_case_insensitive():
    assert resolve_display_text(_mcq(), "b") == "y"
    assert resolve_display_text(_mcq(), " D ") == "w"


def test_resolve_absent_and_passthrough():
    assert resolve_display_text(_mcq(), None) is None
    assert resolve_display_text(_mcq(), "") is None
    short = Question(id="s", type=QuestionType.SHORT_ANSWER, content="?", correct_answer="42")
    assert resolve_display_text(short, "forty two") == "forty two"
    assert resolve_display_text(_mcq(), "E") == "E"
    assert resolve_display_text(_mcq(options=None), "A") == "A"


def test_resolve_more_than_four_options():
    q = _mcq(options=["1", "2", "3", "4", "5"])
    assert resolve_display_text(q, "e") == "5"
    assert option_letters(6) == ["A", "B", "C", "D", "E", "F"]


def test_correctness_uses_raw_tokens():
    assert is_objectively_correct(_mcq(), " b") is True
    assert is_objectively_correct(_mcq(), "y") is False
    tf = Question(id="t", type=QuestionType.TRUE_FALSE, content="?", correct_answer="Đúng")
    assert is_objectively_correct(tf, "Đúng") is True
    assert is_objectively_correct(tf, "Sai") is False
    essay = Question(id="e", type=QuestionType.ESSAY, content="?")
    assert is_objectively_correct(essay, "anything") is None


def test_mark_answers_flags_objective_questions_only():
    assignment = make_assignment(3)
    marks = mark_answers(assignment, {"q1": "b", "q2": "Sai"})
    assert marks == {"q1": True, "q2": False, "q3": False}
    essay = Question(id="e", type=QuestionType.ESSAY, content="?")
    assert mark_answers(assignment.model_copy(update={"questions": [essay]}), {"e": "text"}) == {"e": None}

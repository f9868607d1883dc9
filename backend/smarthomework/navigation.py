from __future__ import annotations
from dataclasses import dataclass
from typing import Union

from .errors import InvalidQuestionIndex


@dataclass(frozen=True)
class Answering:
    index: int


@dataclass(frozen=True)
class Reviewing:
    pass


NavState = Union[Answering, Reviewing]


class ExamNavigator:
    """Question navigation for one exam session.

    The current index is kept while reviewing so that leaving review mode
    returns to the question that was last shown.
    """

    def __init__(self, question_count: int) -> None:
        self.question_count = question_count
        self.current_index = 0
        self.reviewing = False

    @property
    def last_index(self) -> int:
        return max(self.question_count - 1, 0)

    @property
    def state(self) -> NavState:
        if self.reviewing:
            return Reviewing()
        return Answering(self.current_index)

    def next(self) -> NavState:
        if self.reviewing:
            return self.state
        if self.current_index < self.last_index:
            self.current_index += 1
        else:
            self.reviewing = True
        return self.state

    def prev(self) -> NavState:
        if self.reviewing:
            self.reviewing = False
        elif self.current_index > 0:
            self.current_index -= 1
        return self.state

    def jump_to(self, index: int) -> NavState:
        if not 0 <= index < self.question_count:
            raise InvalidQuestionIndex(f"question index must be in [0, {self.question_count})")
        self.current_index = index
        self.reviewing = False
        return self.state

    def enter_review(self) -> NavState:
        self.reviewing = True
        return self.state

    def describe(self) -> dict:
        return {
            "mode": "reviewing" if self.reviewing else "answering",
            "index": self.current_index,
            "is_first": self.current_index == 0,
            "is_last": self.current_index == self.last_index,
        }

"""
Grading rules. Pure functions, no DB access.
Closed-ended: binary, the selected option either is the one flagged correct (100, passed) or not (0).
Open-ended: a score written back later passes when it reaches the question's passing score.
"""
from dataclasses import dataclass
from typing import Iterable

from proximos import errors
from proximos.models.types import parse_public_id

PASS_SCORE = 100
FAIL_SCORE = 0


@dataclass(frozen=True)
class Grade:
    score: int | None
    passed: bool
    option: object | None = None


def grade_closed_ended(options: Iterable, selected_option_id) -> Grade:
    """options: objects with public_id and is_correct. Unknown option => INVALID_INPUT."""
    wanted = parse_public_id(selected_option_id)
    if wanted is None:
        raise errors.invalid_input({"option_id": "required for closed-ended questions"})
    for option in options:
        if option.public_id == wanted:
            if option.is_correct:
                return Grade(score=PASS_SCORE, passed=True, option=option)
            return Grade(score=FAIL_SCORE, passed=False, option=option)
    raise errors.invalid_input({"option_id": "not an option of this question"})


def grade_open_ended(score: int, passing_score: int | None) -> Grade:
    if score is None or not 0 <= score <= 100:
        raise errors.invalid_input({"score": "must be between 0 and 100"})
    threshold = passing_score if passing_score is not None else PASS_SCORE
    return Grade(score=score, passed=score >= threshold)

"""
Quiz Grader

Pure scoring of a quiz submission against its question bank.

Answers are compared to the stored correct answer by exact, case-sensitive
string equality. Answers referencing unknown question ids are skipped so a
single malformed entry cannot abort grading of the whole session.

Scoring policy:
    SCORE_OVER_ATTEMPTED_ONLY = True means only answered questions count
    toward the points total. A quiz answered partially but correctly can
    therefore score 100%. Set it (or pass score_over_attempted_only=False)
    to score against the full question bank instead.

Usage:
    from app.services.learning.quiz_grader import QuizQuestion, grade_submission

    result = grade_submission(
        questions=[QuizQuestion(id=1, correct_answer="A", points=1)],
        answers={1: "A"},
        passing_score_percent=70,
    )
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from app.enums.learning import QuestionType

logger = logging.getLogger(__name__)

SCORE_OVER_ATTEMPTED_ONLY = True


@dataclass(frozen=True)
class QuizQuestion:
    """A gradable question. Only id, correct_answer and points affect scoring."""

    id: int
    correct_answer: str
    points: int = 1
    text: str = ""
    question_type: QuestionType = QuestionType.MULTIPLE_CHOICE
    options: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class GradedAnswer:
    """One submitted answer and whether it matched."""

    question_id: int
    submitted_answer: str
    is_correct: bool


@dataclass(frozen=True)
class QuizGradeResult:
    """Outcome of grading a whole submission."""

    earned_points: int
    total_points: int
    percentage: float
    passed: bool
    answers: tuple[GradedAnswer, ...] = field(default_factory=tuple)


def grade_submission(
    questions: Iterable[QuizQuestion],
    answers: Mapping[int, str],
    passing_score_percent: int,
    score_over_attempted_only: bool = SCORE_OVER_ATTEMPTED_ONLY,
) -> QuizGradeResult:
    """
    Score submitted answers against a question bank.

    Args:
        questions: The quiz's question bank, in any order.
        answers: Mapping of question id to submitted answer string.
        passing_score_percent: Minimum percentage needed to pass.
        score_over_attempted_only: Count only answered questions toward the
            points total (see module docstring).

    Returns:
        QuizGradeResult with graded answers in the mapping's iteration order.
        Percentage is unrounded and 0 when there are no points to score.
    """
    question_map = {q.id: q for q in questions}

    earned_points = 0
    total_points = 0
    graded: list[GradedAnswer] = []

    for question_id, submitted in answers.items():
        question = question_map.get(question_id)
        if question is None:
            logger.warning(
                f"Answer submitted for non-existent question {question_id}"
            )
            continue

        is_correct = submitted == question.correct_answer
        if is_correct:
            earned_points += question.points
        total_points += question.points

        graded.append(
            GradedAnswer(
                question_id=question_id,
                submitted_answer=submitted,
                is_correct=is_correct,
            )
        )

    if not score_over_attempted_only:
        total_points = sum(q.points for q in question_map.values())

    percentage = 0.0
    if total_points > 0:
        percentage = earned_points / total_points * 100

    return QuizGradeResult(
        earned_points=earned_points,
        total_points=total_points,
        percentage=percentage,
        passed=percentage >= passing_score_percent,
        answers=tuple(graded),
    )


def compute_time_spent_seconds(
    started_at: datetime,
    completed_at: Optional[datetime],
) -> int:
    """Whole seconds between session start and completion (0 if not completed)."""
    if completed_at is None:
        return 0
    return int((completed_at - started_at).total_seconds())

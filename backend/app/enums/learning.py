"""
Learning System Enums

Defines enums for the SM-2 spaced repetition scheduler and quizzes.
"""

from enum import Enum


class ReviewQuality(int, Enum):
    """
    SM-2 review quality grades.

    Ordinal recall grade for a single review event. Grades of 3 and above
    count as a successful review; lower grades reset the repetition count.
    """

    BLACKOUT = 0  # Complete blackout
    INCORRECT = 1  # Incorrect response
    INCORRECT_RECOGNIZED = 2  # Incorrect, but recognized once shown
    CORRECT_HARD = 3  # Correct with serious difficulty
    CORRECT_HESITANT = 4  # Correct after hesitation
    PERFECT = 5  # Perfect response

    @property
    def is_success(self) -> bool:
        """Whether this grade counts as a successful recall."""
        return self >= ReviewQuality.CORRECT_HARD


class QuestionType(str, Enum):
    """Quiz question formats."""

    MULTIPLE_CHOICE = "multiple_choice"
    FILL_IN_BLANK = "fill_in_blank"


class QuizType(str, Enum):
    """Content a quiz draws its questions from."""

    VOCABULARY = "vocabulary"
    GRAMMAR = "grammar"
    MIXED = "mixed"


class QuizSessionStatus(str, Enum):
    """
    Quiz attempt states.

    A session moves STARTED → COMPLETED exactly once, when its answers are
    graded. The status is derived from whether completed_at is set.
    """

    STARTED = "started"
    COMPLETED = "completed"

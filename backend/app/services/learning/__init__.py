"""
Learning System Services

Services for SM-2 spaced repetition of vocabulary, quiz grading, and
study progress tracking.

Modules:
- sm2: SM-2 scheduling algorithm (pure functions)
- quiz_grader: Quiz scoring (pure functions)
- vocabulary_service: Vocabulary study and review processing
- grammar_service: Grammar lessons and completion tracking
- quiz_service: Quiz session orchestration
- progress_service: Study streaks and aggregate statistics

Usage:
    from app.services.learning import (
        VocabularyService,
        GrammarService,
        QuizService,
        ProgressService,
    )
"""

from app.services.learning.sm2 import (
    ReviewState,
    ReviewStats,
    compute_next_review,
    get_review_stats,
    initialize_progress,
    is_due,
    quality_from_boolean,
)
from app.services.learning.quiz_grader import (
    QuizGradeResult,
    grade_submission,
)
from app.services.learning.progress_service import ProgressService
from app.services.learning.vocabulary_service import VocabularyService
from app.services.learning.grammar_service import GrammarService
from app.services.learning.quiz_service import QuizService

__all__ = [
    # SM-2
    "ReviewState",
    "ReviewStats",
    "compute_next_review",
    "get_review_stats",
    "initialize_progress",
    "is_due",
    "quality_from_boolean",
    # Grading
    "QuizGradeResult",
    "grade_submission",
    # Services
    "ProgressService",
    "VocabularyService",
    "GrammarService",
    "QuizService",
]

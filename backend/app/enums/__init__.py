"""
Centralized enum definitions for the application.

Usage:
    from app.enums import ReviewQuality, QuestionType

    # Or import from the module directly
    from app.enums.learning import QuizSessionStatus
"""

from app.enums.learning import (
    QuestionType,
    QuizSessionStatus,
    QuizType,
    ReviewQuality,
)

__all__ = [
    "QuestionType",
    "QuizSessionStatus",
    "QuizType",
    "ReviewQuality",
]

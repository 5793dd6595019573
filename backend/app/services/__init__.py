"""Services package for vocabulary review, grammar, quizzes, and study statistics."""

from app.services.learning import (
    GrammarService,
    ProgressService,
    QuizService,
    VocabularyService,
)

__all__ = [
    "GrammarService",
    "ProgressService",
    "QuizService",
    "VocabularyService",
]

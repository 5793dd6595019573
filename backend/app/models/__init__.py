"""Pydantic models for the application."""

from app.models.base import (
    ErrorDetail,
    PaginatedResponse,
    StrictRequest,
    StrictResponse,
)
from app.models.learning import (
    GrammarLessonListResponse,
    GrammarLessonResponse,
    GrammarProgressResponse,
    MarkGrammarCompletedRequest,
    ProgressResponse,
    QuizResultResponse,
    ReviewResponse,
    ReviewSubmitRequest,
    StartQuizResponse,
    UserStatisticsResponse,
    VocabularyListResponse,
    VocabularyResponse,
)

__all__ = [
    "ErrorDetail",
    "PaginatedResponse",
    "StrictRequest",
    "StrictResponse",
    "GrammarLessonListResponse",
    "GrammarLessonResponse",
    "GrammarProgressResponse",
    "MarkGrammarCompletedRequest",
    "ProgressResponse",
    "QuizResultResponse",
    "ReviewResponse",
    "ReviewSubmitRequest",
    "StartQuizResponse",
    "UserStatisticsResponse",
    "VocabularyListResponse",
    "VocabularyResponse",
]

"""
Learning System API Models (Pydantic)

Request/response schemas for:
- Vocabulary items and SM-2 review progress
- Grammar lessons and completion progress
- Quiz sessions, submissions and results
- Per-user study statistics

ARCHITECTURE NOTE:
    This file contains PYDANTIC models for API validation.
    There are corresponding SQLAlchemy files: app/db/models.py and
    app/db/models_learning.py

    Data flows: Request → Pydantic → Service → SQLAlchemy → Database

API Contract:
    Request models use StrictRequest (extra="forbid") to reject unknown fields.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import ConfigDict, Field, model_validator

from app.enums.learning import QuestionType, QuizSessionStatus
from app.models.base import PaginatedResponse, StrictRequest, StrictResponse


# ===========================================
# Vocabulary & Review Models
# ===========================================


class ReviewSubmitRequest(StrictRequest):
    """
    Review submission for a vocabulary item.

    Clients send either a binary is_correct signal (mapped to quality 4 or 1)
    or a full SM-2 quality grade, never both.
    """

    is_correct: Optional[bool] = Field(None, description="Binary recall outcome")
    quality: Optional[int] = Field(
        None, ge=0, le=5, description="SM-2 quality grade (0-5)"
    )

    @model_validator(mode="after")
    def _exactly_one_signal(self) -> "ReviewSubmitRequest":
        if (self.is_correct is None) == (self.quality is None):
            raise ValueError("Provide exactly one of 'is_correct' or 'quality'")
        return self


class ProgressResponse(StrictResponse):
    """SM-2 progress for one vocabulary item, with derived fields."""

    id: int
    ease_factor: float
    interval_days: int = Field(description="Days until next review")
    repetitions: int
    next_review_date: datetime
    last_reviewed_at: Optional[datetime] = None
    total_reviews: int
    correct_reviews: int
    success_rate: float = Field(0.0, description="Correct / total x 100")
    is_due: bool = False


class VocabularyResponse(StrictResponse):
    """Vocabulary item, optionally with the requesting user's progress."""

    id: int
    word: str
    reading: str
    meaning: str
    part_of_speech: Optional[str] = None
    jlpt_level: int
    example_sentence: Optional[str] = None
    example_translation: Optional[str] = None
    audio_url: Optional[str] = None
    progress: Optional[ProgressResponse] = None


class VocabularyListResponse(PaginatedResponse):
    """A page of vocabulary, each item with the user's progress if started."""

    items: list[VocabularyResponse]


class ReviewResponse(StrictResponse):
    """Result of a review submission."""

    success: bool = True
    progress: ProgressResponse
    next_review_date: datetime
    message: str


class ReviewStatsResponse(StrictResponse):
    """Display statistics for one item's review history."""

    success_rate: float
    total_reviews: int
    correct_reviews: int
    current_interval_days: int
    repetitions: int
    ease_factor: float
    days_since_last_review: Optional[int] = None
    days_until_next_review: int
    is_due: bool


# ===========================================
# Grammar Models
# ===========================================


class GrammarExampleResponse(StrictResponse):
    """An example sentence for a grammar lesson."""

    id: int
    japanese_sentence: str
    english_translation: str
    notes: Optional[str] = None


class GrammarProgressResponse(StrictResponse):
    """The user's completion state for a grammar lesson."""

    id: int
    completed: bool
    completed_at: Optional[datetime] = None
    notes: Optional[str] = None


class GrammarLessonResponse(StrictResponse):
    """Grammar lesson with its examples and, if any, the user's progress."""

    id: int
    title: str
    grammar_point: str
    explanation: str
    usage_notes: Optional[str] = None
    jlpt_level: int
    lesson_order: Optional[int] = None
    examples: list[GrammarExampleResponse] = Field(default_factory=list)
    progress: Optional[GrammarProgressResponse] = None


class GrammarLessonListResponse(PaginatedResponse):
    """A page of grammar lessons."""

    items: list[GrammarLessonResponse]


class MarkGrammarCompletedRequest(StrictRequest):
    """Mark a grammar lesson as completed, optionally with notes."""

    notes: Optional[str] = Field(None, max_length=2000)


# ===========================================
# Quiz Models
# ===========================================


class QuizResponse(StrictResponse):
    """Quiz metadata."""

    id: int
    title: str
    description: Optional[str] = None
    quiz_type: Optional[str] = None
    jlpt_level: int
    time_limit_minutes: Optional[int] = None
    passing_score: int


class QuizQuestionResponse(StrictResponse):
    """
    Question as shown while the quiz is in progress.

    The correct answer and explanation are deliberately absent.
    """

    id: int
    question_text: str
    question_type: QuestionType
    options: list[str] = Field(default_factory=list)
    points: int


class QuizQuestionDetailResponse(QuizQuestionResponse):
    """Question with its answer, shown once a session is graded."""

    correct_answer: str
    explanation: Optional[str] = None


class StartQuizResponse(StrictResponse):
    """A freshly started quiz session."""

    session_id: int
    quiz: QuizResponse
    questions: list[QuizQuestionResponse]
    started_at: datetime


class QuizSubmitRequest(StrictRequest):
    """Answers for a quiz session, keyed by question id."""

    # Answers are compared verbatim, so whitespace must survive validation.
    model_config = ConfigDict(str_strip_whitespace=False)

    answers: dict[int, str] = Field(
        ..., min_length=1, description="question_id -> submitted answer"
    )


class QuizAnswerResponse(StrictResponse):
    """A submitted answer and its correctness."""

    question_id: int
    user_answer: Optional[str] = None
    is_correct: bool


class QuizResultResponse(StrictResponse):
    """Graded result of a completed quiz session."""

    session_id: int
    quiz: QuizResponse
    score: int = Field(description="Points earned")
    total_points: int = Field(description="Points possible over scored questions")
    percentage: float
    total_questions: int
    passed: bool
    started_at: datetime
    completed_at: datetime
    time_spent_seconds: int
    questions: list[QuizQuestionDetailResponse] = Field(default_factory=list)
    answers: list[QuizAnswerResponse] = Field(default_factory=list)


class QuizSessionSummary(StrictResponse):
    """One entry in a user's quiz history."""

    id: int
    quiz_id: int
    status: QuizSessionStatus
    started_at: datetime
    completed_at: Optional[datetime] = None
    score: Optional[int] = None
    total_points: Optional[int] = None
    percentage: Optional[float] = None
    passed: Optional[bool] = None


# ===========================================
# Statistics Models
# ===========================================


class UserStatisticsResponse(StrictResponse):
    """Overall study statistics for a user."""

    user_id: int
    study_streak_days: int = 0
    last_study_date: Optional[date] = None
    total_study_time_minutes: int = 0
    vocabulary_learned: int = Field(0, description="Items the user has started")
    vocabulary_due_count: int = 0
    grammar_completed: int = 0
    grammar_total: int = Field(0, description="Grammar lessons available")
    quizzes_taken: int = 0
    quizzes_passed: int = 0
    average_quiz_score: float = 0.0

"""
SQLAlchemy Database Models for the Learning System

These models hold each learner's study state: SM-2 scheduling progress for
vocabulary, grammar lesson completion, quiz attempts and their answers,
and study streak statistics.

Tables:
- user_vocabulary_progress: SM-2 state per user x vocabulary item
- user_grammar_progress: Lesson completion per user x grammar lesson
- quiz_sessions: One row per quiz attempt
- quiz_answers: Graded answers belonging to a quiz session
- user_statistics: Study streak and totals per user

ARCHITECTURE NOTE:
    This file contains SQLALCHEMY models for database persistence.
    There is a corresponding Pydantic file: app/models/learning.py

    Data flows: Service Layer → Pydantic → SQLAlchemy → Database

    Users and authentication are owned by an external service; user_id
    columns hold the caller-supplied identifier.
"""

from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


# ===========================================
# Vocabulary & Grammar Progress
# ===========================================


class UserVocabularyProgress(Base):
    """
    SM-2 scheduling state for one user and one vocabulary item.

    Rows are created on the first review (or an explicit "start studying")
    and are never deleted, so the review counters remain available for
    statistics.

    Attributes:
        id: Primary key.
        user_id: Learner identifier.
        vocabulary_id: Foreign key to the vocabulary item.
        ease_factor: SM-2 ease factor, >= 1.3, starts at 2.5.
        interval: Days until the next review, >= 1.
        repetitions: Consecutive successful reviews; reset on failure.
        next_review_date: When the item becomes due again.
        last_reviewed_at: Most recent review, null before the first.
        total_reviews: Reviews ever submitted. Never reset.
        correct_reviews: Successful reviews ever submitted. Never reset.
    """

    __tablename__ = "user_vocabulary_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "vocabulary_id", name="uq_user_vocabulary"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, index=True)
    vocabulary_id: Mapped[int] = mapped_column(
        ForeignKey("vocabulary.id", ondelete="CASCADE"), index=True
    )

    # SM-2 state
    ease_factor: Mapped[float] = mapped_column(Float, default=2.5)
    interval: Mapped[int] = mapped_column(Integer, default=1)
    repetitions: Mapped[int] = mapped_column(Integer, default=0)
    next_review_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, index=True
    )
    last_reviewed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True)
    )

    # Counters
    total_reviews: Mapped[int] = mapped_column(Integer, default=0)
    correct_reviews: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, onupdate=_utc_now
    )

    vocabulary = relationship("Vocabulary")


class UserGrammarProgress(Base):
    """
    Completion state for one user and one grammar lesson.

    Attributes:
        user_id: Learner identifier.
        grammar_lesson_id: Foreign key to the lesson.
        completed: Whether the learner marked the lesson as done.
        completed_at: When it was (most recently) marked as done.
        notes: Optional learner notes.
    """

    __tablename__ = "user_grammar_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "grammar_lesson_id", name="uq_user_grammar_lesson"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, index=True)
    grammar_lesson_id: Mapped[int] = mapped_column(
        ForeignKey("grammar_lessons.id", ondelete="CASCADE"), index=True
    )
    completed: Mapped[bool] = mapped_column(Boolean, default=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    notes: Mapped[Optional[str]] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, onupdate=_utc_now
    )


# ===========================================
# Quiz Sessions & Answers
# ===========================================


class QuizSession(Base):
    """
    A single attempt at a quiz.

    The session is "started" while completed_at is null and becomes
    "completed" when its answers are graded. Score fields stay null until
    then.
    """

    __tablename__ = "quiz_sessions"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, index=True)
    quiz_id: Mapped[int] = mapped_column(
        ForeignKey("quizzes.id", ondelete="CASCADE"), index=True
    )
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    # Results (set on completion)
    score: Mapped[Optional[int]] = mapped_column(Integer)
    total_points: Mapped[Optional[int]] = mapped_column(Integer)
    percentage: Mapped[Optional[float]] = mapped_column(Float)
    passed: Mapped[Optional[bool]] = mapped_column(Boolean)
    time_spent_seconds: Mapped[Optional[int]] = mapped_column(Integer)

    answers: Mapped[List["QuizAnswer"]] = relationship(
        back_populates="session", cascade="all, delete-orphan"
    )

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None


class QuizAnswer(Base):
    """A graded answer submitted in a quiz session."""

    __tablename__ = "quiz_answers"

    id: Mapped[int] = mapped_column(primary_key=True)
    quiz_session_id: Mapped[int] = mapped_column(
        ForeignKey("quiz_sessions.id", ondelete="CASCADE"), index=True
    )
    quiz_question_id: Mapped[int] = mapped_column(
        ForeignKey("quiz_questions.id", ondelete="CASCADE")
    )
    user_answer: Mapped[Optional[str]] = mapped_column(Text)
    is_correct: Mapped[Optional[bool]] = mapped_column(Boolean)
    answered_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now
    )

    session: Mapped["QuizSession"] = relationship(back_populates="answers")


# ===========================================
# Statistics
# ===========================================


class UserStatistics(Base):
    """
    Per-user study streak and totals.

    Attributes:
        user_id: Learner identifier (one row per user).
        study_streak_days: Consecutive calendar days with study activity.
        last_study_date: Most recent day with activity.
        total_study_time_minutes: Accumulated study time.
    """

    __tablename__ = "user_statistics"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, unique=True)
    study_streak_days: Mapped[int] = mapped_column(Integer, default=0)
    last_study_date: Mapped[Optional[date]] = mapped_column(Date)
    total_study_time_minutes: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, onupdate=_utc_now
    )

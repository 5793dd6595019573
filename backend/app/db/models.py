"""
SQLAlchemy Database Models for Study Content

These models define the PostgreSQL schema for the content learners study.
Per-user learning state lives in app/db/models_learning.py.

Tables:
- vocabulary: JLPT vocabulary items
- quizzes: Quiz definitions
- quiz_questions: Questions belonging to a quiz
- grammar_lessons: Grammar points with explanations
- grammar_examples: Example sentences belonging to a grammar lesson
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


class Vocabulary(Base):
    """
    Vocabulary items available for study.

    Attributes:
        id: Primary key.
        word: Written form (kanji or kana).
        reading: Kana reading.
        meaning: English gloss.
        part_of_speech: Optional grammatical category (noun, verb, ...).
        jlpt_level: JLPT level 1-5 (5 is the easiest).
        example_sentence: Optional Japanese usage example.
        example_translation: Optional translation of the example.
        audio_url: Optional pronunciation recording.
    """

    __tablename__ = "vocabulary"

    id: Mapped[int] = mapped_column(primary_key=True)
    word: Mapped[str] = mapped_column(String(100))
    reading: Mapped[str] = mapped_column(String(100))
    meaning: Mapped[str] = mapped_column(String(500))
    part_of_speech: Mapped[Optional[str]] = mapped_column(String(50))
    jlpt_level: Mapped[int] = mapped_column(Integer, default=5, index=True)
    example_sentence: Mapped[Optional[str]] = mapped_column(Text)
    example_translation: Mapped[Optional[str]] = mapped_column(Text)
    audio_url: Mapped[Optional[str]] = mapped_column(String(2000))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, onupdate=_utc_now
    )


class Quiz(Base):
    """
    Quiz definitions.

    Attributes:
        id: Primary key.
        title: Display title.
        description: Optional longer description.
        quiz_type: vocabulary, grammar or mixed (see QuizType).
        jlpt_level: JLPT level the quiz targets.
        time_limit_minutes: Optional advisory time limit.
        passing_score: Minimum percentage (0-100) required to pass.
        questions: Questions in display order.
    """

    __tablename__ = "quizzes"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[Optional[str]] = mapped_column(Text)
    quiz_type: Mapped[Optional[str]] = mapped_column(String(50))
    jlpt_level: Mapped[int] = mapped_column(Integer, default=5, index=True)
    time_limit_minutes: Mapped[Optional[int]] = mapped_column(Integer)
    passing_score: Mapped[int] = mapped_column(Integer, default=70)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, onupdate=_utc_now
    )

    questions: Mapped[List["QuizQuestion"]] = relationship(
        back_populates="quiz",
        cascade="all, delete-orphan",
        order_by="QuizQuestion.question_order",
    )


class QuizQuestion(Base):
    """
    A question within a quiz.

    Multiple-choice questions carry up to four options; fill-in-blank
    questions leave them empty. correct_answer is never sent to clients
    before the session is graded.
    """

    __tablename__ = "quiz_questions"

    id: Mapped[int] = mapped_column(primary_key=True)
    quiz_id: Mapped[int] = mapped_column(
        ForeignKey("quizzes.id", ondelete="CASCADE"), index=True
    )
    question_type: Mapped[str] = mapped_column(String(50))
    question_text: Mapped[str] = mapped_column(Text)
    correct_answer: Mapped[str] = mapped_column(String(500))
    option_a: Mapped[Optional[str]] = mapped_column(String(500))
    option_b: Mapped[Optional[str]] = mapped_column(String(500))
    option_c: Mapped[Optional[str]] = mapped_column(String(500))
    option_d: Mapped[Optional[str]] = mapped_column(String(500))
    explanation: Mapped[Optional[str]] = mapped_column(Text)
    points: Mapped[int] = mapped_column(Integer, default=1)
    question_order: Mapped[Optional[int]] = mapped_column(Integer)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now
    )

    quiz: Mapped["Quiz"] = relationship(back_populates="questions")

    @property
    def options(self) -> list[str]:
        """Non-empty options in A-D order."""
        return [
            o
            for o in (self.option_a, self.option_b, self.option_c, self.option_d)
            if o is not None
        ]


class GrammarLesson(Base):
    """
    Grammar lessons, read in lesson_order within a JLPT level.

    Attributes:
        id: Primary key.
        title: Display title.
        grammar_point: The pattern being taught (e.g. "XはYです").
        explanation: How the pattern works.
        usage_notes: Optional pitfalls and pronunciation notes.
        jlpt_level: JLPT level 1-5 (5 is the easiest).
        lesson_order: Optional position in the course.
        examples: Example sentences in display order.
    """

    __tablename__ = "grammar_lessons"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(255))
    grammar_point: Mapped[str] = mapped_column(String(255))
    explanation: Mapped[str] = mapped_column(Text)
    usage_notes: Mapped[Optional[str]] = mapped_column(Text)
    jlpt_level: Mapped[int] = mapped_column(Integer, default=5, index=True)
    lesson_order: Mapped[Optional[int]] = mapped_column(Integer)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, onupdate=_utc_now
    )

    examples: Mapped[List["GrammarExample"]] = relationship(
        back_populates="lesson",
        cascade="all, delete-orphan",
        order_by="GrammarExample.example_order",
    )


class GrammarExample(Base):
    """An example sentence illustrating a grammar lesson."""

    __tablename__ = "grammar_examples"

    id: Mapped[int] = mapped_column(primary_key=True)
    grammar_lesson_id: Mapped[int] = mapped_column(
        ForeignKey("grammar_lessons.id", ondelete="CASCADE"), index=True
    )
    japanese_sentence: Mapped[str] = mapped_column(Text)
    english_translation: Mapped[str] = mapped_column(Text)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    example_order: Mapped[Optional[int]] = mapped_column(Integer)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now
    )

    lesson: Mapped["GrammarLesson"] = relationship(back_populates="examples")

"""
Quiz Session Service

Orchestrates quiz attempts:
1. Start a session for a quiz (answers hidden from the response)
2. Grade submitted answers and persist the result (terminal transition)
3. Read back stored results and a user's quiz history

A session is "started" until its answers are graded and "completed" after.
The transition happens at most once: the session row is locked FOR UPDATE
and a completed session rejects further submissions.

Usage:
    from app.services.learning import QuizService

    service = QuizService(db)
    started = await service.start_quiz_session(user_id=1, quiz_id=3)
    result = await service.submit_quiz_answers(
        user_id=1, session_id=started.session_id, answers={10: "A"}
    )
"""

import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import settings
from app.db.models import Quiz, QuizQuestion
from app.db.models_learning import QuizAnswer, QuizSession
from app.enums.learning import QuestionType, QuizSessionStatus
from app.errors import (
    AuthorizationError,
    InvalidSessionStateError,
    NotFoundError,
    ValidationError,
)
from app.models.learning import (
    QuizAnswerResponse,
    QuizQuestionDetailResponse,
    QuizQuestionResponse,
    QuizResponse,
    QuizResultResponse,
    QuizSessionSummary,
    StartQuizResponse,
)
from app.services.learning.progress_service import ProgressService
from app.services.learning.quiz_grader import (
    QuizQuestion as GradableQuestion,
    compute_time_spent_seconds,
    grade_submission,
)

logger = logging.getLogger(__name__)


class QuizService:
    """
    Service for quiz sessions and grading.

    Grading itself is delegated to the pure quiz grader; this class loads
    and persists the rows around it.
    """

    def __init__(
        self,
        db: AsyncSession,
        progress_service: Optional[ProgressService] = None,
    ):
        self.db = db
        self.progress_service = progress_service or ProgressService(db)

    # ------------------------------------------------------------------
    # Quizzes
    # ------------------------------------------------------------------

    async def get_quiz(self, quiz_id: int) -> QuizResponse:
        """
        Get quiz metadata.

        Raises:
            NotFoundError: If the quiz does not exist
        """
        quiz = await self._get_quiz_or_raise(quiz_id)
        return QuizResponse.model_validate(quiz)

    async def list_quizzes(
        self,
        jlpt_level: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> list[QuizResponse]:
        """List quizzes, optionally restricted to one JLPT level."""
        limit = limit or settings.QUIZ_LIST_DEFAULT_LIMIT

        query = select(Quiz).order_by(Quiz.id.asc()).limit(limit)
        if jlpt_level is not None:
            query = query.where(Quiz.jlpt_level == jlpt_level)

        result = await self.db.execute(query)
        return [QuizResponse.model_validate(q) for q in result.scalars().all()]

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    async def start_quiz_session(
        self,
        user_id: int,
        quiz_id: int,
        now: Optional[datetime] = None,
    ) -> StartQuizResponse:
        """
        Start a new attempt at a quiz.

        Returns:
            The new session with the quiz's questions, correct answers omitted

        Raises:
            NotFoundError: If the quiz does not exist
            ValidationError: If the quiz has no questions
        """
        now = now or datetime.now(timezone.utc)

        quiz = await self._get_quiz_or_raise(quiz_id)
        questions = await self._get_questions(quiz_id)
        if not questions:
            raise ValidationError(
                "Quiz has no questions", details={"quiz_id": quiz_id}
            )

        session = QuizSession(user_id=user_id, quiz_id=quiz_id, started_at=now)
        self.db.add(session)
        await self.db.commit()
        await self.db.refresh(session)

        logger.info(
            f"User {user_id} started quiz {quiz_id} "
            f"(session {session.id}, {len(questions)} questions)"
        )

        return StartQuizResponse(
            session_id=session.id,
            quiz=QuizResponse.model_validate(quiz),
            questions=[self._to_question_response(q) for q in questions],
            started_at=session.started_at,
        )

    async def submit_quiz_answers(
        self,
        user_id: int,
        session_id: int,
        answers: Mapping[int, str],
        now: Optional[datetime] = None,
    ) -> QuizResultResponse:
        """
        Grade a session's answers and complete it.

        Answers for questions outside the quiz are ignored by the grader.
        Whether unanswered questions count toward the total is controlled by
        settings.QUIZ_SCORE_OVER_ATTEMPTED_ONLY.

        Args:
            user_id: Learner submitting the answers
            session_id: Session being completed
            answers: Mapping of question id to submitted answer
            now: Completion time (default: current UTC time)

        Raises:
            NotFoundError: If the session does not exist
            AuthorizationError: If the session belongs to another user
            InvalidSessionStateError: If the session is already completed
            ValidationError: If no answers were submitted
        """
        if not answers:
            raise ValidationError("No answers submitted")
        now = now or datetime.now(timezone.utc)

        session = await self._get_session_or_raise(
            user_id, session_id, for_update=True
        )
        if session.is_completed:
            raise InvalidSessionStateError(
                "Quiz session already completed",
                details={"session_id": session_id},
            )

        quiz = await self._get_quiz_or_raise(session.quiz_id)
        questions = await self._get_questions(session.quiz_id)

        grade = grade_submission(
            questions=[self._to_gradable(q) for q in questions],
            answers=answers,
            passing_score_percent=quiz.passing_score,
            score_over_attempted_only=settings.QUIZ_SCORE_OVER_ATTEMPTED_ONLY,
        )

        answer_rows = [
            QuizAnswer(
                quiz_session_id=session.id,
                quiz_question_id=graded.question_id,
                user_answer=graded.submitted_answer,
                is_correct=graded.is_correct,
                answered_at=now,
            )
            for graded in grade.answers
        ]
        self.db.add_all(answer_rows)

        session.completed_at = now
        session.score = grade.earned_points
        session.total_points = grade.total_points
        session.percentage = grade.percentage
        session.passed = grade.passed
        session.time_spent_seconds = compute_time_spent_seconds(
            session.started_at, now
        )

        await self.progress_service.update_study_streak(user_id, now.date())

        await self.db.commit()
        await self.db.refresh(session)

        logger.info(
            f"Graded quiz session {session.id} for user {user_id}: "
            f"{grade.earned_points}/{grade.total_points} "
            f"({grade.percentage:.1f}%, passed={grade.passed})"
        )

        return self._to_result_response(session, quiz, questions, answer_rows)

    async def get_quiz_session_result(
        self,
        user_id: int,
        session_id: int,
    ) -> QuizResultResponse:
        """
        Get the stored result of a completed session.

        Raises:
            NotFoundError: If the session does not exist
            AuthorizationError: If the session belongs to another user
            InvalidSessionStateError: If the session has not been completed
        """
        session = await self._get_session_or_raise(user_id, session_id)
        if not session.is_completed:
            raise InvalidSessionStateError(
                "Quiz session not completed yet",
                details={"session_id": session_id},
            )

        quiz = await self._get_quiz_or_raise(session.quiz_id)
        questions = await self._get_questions(session.quiz_id)

        result = await self.db.execute(
            select(QuizAnswer)
            .where(QuizAnswer.quiz_session_id == session.id)
            .order_by(QuizAnswer.id.asc())
        )
        answer_rows = list(result.scalars().all())

        return self._to_result_response(session, quiz, questions, answer_rows)

    async def get_user_quiz_history(
        self,
        user_id: int,
        limit: Optional[int] = None,
    ) -> list[QuizSessionSummary]:
        """A user's quiz sessions, most recent first."""
        limit = limit or settings.QUIZ_HISTORY_DEFAULT_LIMIT

        result = await self.db.execute(
            select(QuizSession)
            .where(QuizSession.user_id == user_id)
            .order_by(QuizSession.started_at.desc())
            .limit(limit)
        )

        return [
            QuizSessionSummary(
                id=s.id,
                quiz_id=s.quiz_id,
                status=(
                    QuizSessionStatus.COMPLETED
                    if s.is_completed
                    else QuizSessionStatus.STARTED
                ),
                started_at=s.started_at,
                completed_at=s.completed_at,
                score=s.score,
                total_points=s.total_points,
                percentage=s.percentage,
                passed=s.passed,
            )
            for s in result.scalars().all()
        ]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _get_quiz_or_raise(self, quiz_id: int) -> Quiz:
        result = await self.db.execute(select(Quiz).where(Quiz.id == quiz_id))
        quiz = result.scalar_one_or_none()
        if quiz is None:
            raise NotFoundError("Quiz not found", details={"quiz_id": quiz_id})
        return quiz

    async def _get_questions(self, quiz_id: int) -> list[QuizQuestion]:
        result = await self.db.execute(
            select(QuizQuestion)
            .where(QuizQuestion.quiz_id == quiz_id)
            .order_by(QuizQuestion.question_order.asc(), QuizQuestion.id.asc())
        )
        return list(result.scalars().all())

    async def _get_session_or_raise(
        self,
        user_id: int,
        session_id: int,
        for_update: bool = False,
    ) -> QuizSession:
        query = select(QuizSession).where(QuizSession.id == session_id)
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        session = result.scalar_one_or_none()

        if session is None:
            raise NotFoundError(
                "Quiz session not found", details={"session_id": session_id}
            )
        if session.user_id != user_id:
            raise AuthorizationError(
                "Quiz session belongs to another user",
                details={"session_id": session_id},
            )
        return session

    @staticmethod
    def _to_gradable(question: QuizQuestion) -> GradableQuestion:
        return GradableQuestion(
            id=question.id,
            correct_answer=question.correct_answer,
            points=question.points if question.points is not None else 1,
            text=question.question_text,
            question_type=QuestionType(question.question_type),
            options=tuple(question.options),
        )

    @staticmethod
    def _to_question_response(question: QuizQuestion) -> QuizQuestionResponse:
        return QuizQuestionResponse(
            id=question.id,
            question_text=question.question_text,
            question_type=question.question_type,
            options=question.options,
            points=question.points,
        )

    @staticmethod
    def _to_result_response(
        session: QuizSession,
        quiz: Quiz,
        questions: list[QuizQuestion],
        answer_rows: list[QuizAnswer],
    ) -> QuizResultResponse:
        """Build the result response from persisted rows."""
        return QuizResultResponse(
            session_id=session.id,
            quiz=QuizResponse.model_validate(quiz),
            score=session.score or 0,
            total_points=session.total_points or 0,
            percentage=session.percentage or 0.0,
            total_questions=len(questions),
            passed=bool(session.passed),
            started_at=session.started_at,
            completed_at=session.completed_at,
            time_spent_seconds=compute_time_spent_seconds(
                session.started_at, session.completed_at
            ),
            questions=[
                QuizQuestionDetailResponse(
                    id=q.id,
                    question_text=q.question_text,
                    question_type=q.question_type,
                    options=q.options,
                    points=q.points,
                    correct_answer=q.correct_answer,
                    explanation=q.explanation,
                )
                for q in questions
            ],
            answers=[
                QuizAnswerResponse(
                    question_id=a.quiz_question_id,
                    user_answer=a.user_answer,
                    is_correct=bool(a.is_correct),
                )
                for a in answer_rows
            ],
        )

"""
Progress Statistics Service

Tracks study streaks and aggregates per-user learning statistics.

Responsibilities:
- Maintain the consecutive-day study streak
- Summarize vocabulary, grammar and quiz progress for dashboards

Usage:
    from app.services.learning.progress_service import ProgressService

    service = ProgressService(db)
    await service.update_study_streak(user_id=1)
    stats = await service.get_user_statistics(user_id=1)
"""

import logging
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import GrammarLesson
from app.db.models_learning import (
    QuizSession,
    UserGrammarProgress,
    UserStatistics,
    UserVocabularyProgress,
)
from app.models.learning import UserStatisticsResponse

logger = logging.getLogger(__name__)


def compute_study_streak(
    last_study_date: Optional[date],
    current_streak: int,
    today: date,
) -> int:
    """
    Compute the streak after studying on `today`.

    Returns:
        current_streak if already counted today, current_streak + 1 if the
        last study day was yesterday, otherwise 1 (first study, a gap, or a
        last_study_date in the future).
    """
    if last_study_date is None:
        return 1

    days_diff = (today - last_study_date).days
    if days_diff == 0:
        return current_streak
    if days_diff == 1:
        return current_streak + 1
    return 1


class ProgressService:
    """
    Service for study streaks and aggregate statistics.

    Callers own the transaction: this service flushes but does not commit,
    so a streak update lands atomically with the review or quiz that
    triggered it.
    """

    def __init__(self, db: AsyncSession):
        """
        Initialize the progress service.

        Args:
            db: SQLAlchemy async database session.
        """
        self.db = db

    async def update_study_streak(
        self,
        user_id: int,
        today: Optional[date] = None,
    ) -> UserStatistics:
        """
        Record study activity for `today` and update the streak.

        Creates the statistics row on a user's first activity. The row is
        locked for the rest of the caller's transaction.
        """
        today = today or datetime.now(timezone.utc).date()

        stats = await self._lock_statistics(user_id)
        if stats is None:
            # Concurrent first activity: the losing insert does nothing and
            # waits on the winner's row lock below.
            await self.db.execute(
                insert(UserStatistics)
                .values(
                    user_id=user_id,
                    study_streak_days=0,
                    last_study_date=None,
                    total_study_time_minutes=0,
                )
                .on_conflict_do_nothing(index_elements=["user_id"])
            )
            stats = await self._lock_statistics(user_id)

        new_streak = compute_study_streak(
            stats.last_study_date, stats.study_streak_days or 0, today
        )
        if new_streak != stats.study_streak_days:
            logger.info(
                f"Study streak for user {user_id}: "
                f"{stats.study_streak_days} -> {new_streak}"
            )
        stats.study_streak_days = new_streak
        stats.last_study_date = today
        await self.db.flush()
        return stats

    async def get_user_statistics(
        self,
        user_id: int,
        now: Optional[datetime] = None,
    ) -> UserStatisticsResponse:
        """
        Aggregate a user's study statistics.

        A user with no statistics row yet gets zeroed streak fields; the
        vocabulary, grammar and quiz figures are always computed from their
        tables.
        """
        now = now or datetime.now(timezone.utc)

        result = await self.db.execute(
            select(UserStatistics).where(UserStatistics.user_id == user_id)
        )
        stats = result.scalar_one_or_none()

        # --- Vocabulary ---
        learned_result = await self.db.execute(
            select(func.count(UserVocabularyProgress.id)).where(
                UserVocabularyProgress.user_id == user_id
            )
        )
        vocabulary_learned = learned_result.scalar() or 0

        due_result = await self.db.execute(
            select(func.count(UserVocabularyProgress.id)).where(
                UserVocabularyProgress.user_id == user_id,
                UserVocabularyProgress.next_review_date <= now,
            )
        )
        vocabulary_due_count = due_result.scalar() or 0

        # --- Grammar ---
        completed_result = await self.db.execute(
            select(func.count(UserGrammarProgress.id)).where(
                UserGrammarProgress.user_id == user_id,
                UserGrammarProgress.completed.is_(True),
            )
        )
        grammar_completed = completed_result.scalar() or 0

        total_result = await self.db.execute(select(func.count(GrammarLesson.id)))
        grammar_total = total_result.scalar() or 0

        # --- Quizzes (completed sessions only) ---
        quiz_result = await self.db.execute(
            select(
                func.count(QuizSession.id),
                func.count(QuizSession.id).filter(QuizSession.passed.is_(True)),
                func.avg(QuizSession.percentage),
            ).where(
                QuizSession.user_id == user_id,
                QuizSession.completed_at.is_not(None),
            )
        )
        quizzes_taken, quizzes_passed, average_quiz_score = quiz_result.one()

        return UserStatisticsResponse(
            user_id=user_id,
            study_streak_days=stats.study_streak_days if stats else 0,
            last_study_date=stats.last_study_date if stats else None,
            total_study_time_minutes=stats.total_study_time_minutes if stats else 0,
            vocabulary_learned=vocabulary_learned,
            vocabulary_due_count=vocabulary_due_count,
            grammar_completed=grammar_completed,
            grammar_total=grammar_total,
            quizzes_taken=quizzes_taken or 0,
            quizzes_passed=quizzes_passed or 0,
            average_quiz_score=float(average_quiz_score or 0.0),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _lock_statistics(self, user_id: int) -> Optional[UserStatistics]:
        result = await self.db.execute(
            select(UserStatistics)
            .where(UserStatistics.user_id == user_id)
            .with_for_update()
        )
        return result.scalar_one_or_none()

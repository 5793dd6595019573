"""
Vocabulary Review Service

Service layer that integrates SM-2 scheduling with the database.
Handles starting study of vocabulary items, review processing, due item
queries and per-item statistics.

Every review is a read-modify-write of one user_vocabulary_progress row.
The row is loaded with SELECT ... FOR UPDATE so concurrent submissions for
the same user and item serialize instead of overwriting each other. A
missing row is first created with INSERT ... ON CONFLICT DO NOTHING and then
locked, so two first reviews of the same item also serialize.

Usage:
    from app.services.learning import VocabularyService

    service = VocabularyService(db_session)

    # Get due items
    due = await service.get_due_vocabulary(user_id=1, limit=20)

    # Process a review
    result = await service.submit_review(user_id=1, vocabulary_id=42, is_correct=True)
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import settings
from app.db.models import Vocabulary
from app.db.models_learning import UserVocabularyProgress
from app.errors import ConflictError, NotFoundError, ValidationError
from app.models.learning import (
    ProgressResponse,
    ReviewResponse,
    ReviewStatsResponse,
    VocabularyListResponse,
    VocabularyResponse,
)
from app.services.learning.progress_service import ProgressService
from app.services.learning.sm2 import (
    ReviewState,
    compute_next_review,
    get_review_stats,
    initialize_progress,
    is_due,
    quality_from_boolean,
)

logger = logging.getLogger(__name__)


def progress_to_state(progress: UserVocabularyProgress) -> ReviewState:
    """Read the SM-2 state out of a progress row."""
    return ReviewState(
        ease_factor=progress.ease_factor,
        interval=progress.interval,
        repetitions=progress.repetitions,
        next_review_date=progress.next_review_date,
        last_reviewed_at=progress.last_reviewed_at,
        total_reviews=progress.total_reviews,
        correct_reviews=progress.correct_reviews,
    )


def state_to_columns(state: ReviewState) -> dict:
    """Map a state onto the evolving columns of user_vocabulary_progress."""
    return {
        "ease_factor": state.ease_factor,
        "interval": state.interval,
        "repetitions": state.repetitions,
        "next_review_date": state.next_review_date,
        "last_reviewed_at": state.last_reviewed_at,
        "total_reviews": state.total_reviews,
        "correct_reviews": state.correct_reviews,
    }


def apply_state(progress: UserVocabularyProgress, state: ReviewState) -> None:
    """Overwrite every evolving column of a progress row from a state."""
    for column, value in state_to_columns(state).items():
        setattr(progress, column, value)


class VocabularyService:
    """
    Service for vocabulary study with SM-2 scheduling.

    Provides:
    - Vocabulary lookup and paginated listing with the user's progress
    - Due item queries
    - Review processing (initialize-then-review for unseen items)
    - Per-item review statistics
    """

    def __init__(
        self,
        db: AsyncSession,
        progress_service: Optional[ProgressService] = None,
    ):
        """
        Initialize the vocabulary service.

        Args:
            db: Async database session
            progress_service: Streak tracker (defaults to one sharing `db`)
        """
        self.db = db
        self.progress_service = progress_service or ProgressService(db)

    async def get_vocabulary(
        self,
        user_id: int,
        vocabulary_id: int,
        now: Optional[datetime] = None,
    ) -> VocabularyResponse:
        """
        Get a vocabulary item with the user's progress, if any.

        Raises:
            NotFoundError: If the vocabulary item does not exist
        """
        now = now or datetime.now(timezone.utc)
        vocabulary = await self._get_vocabulary_or_raise(vocabulary_id)
        progress = await self._get_progress(user_id, vocabulary_id)
        return self._to_vocabulary_response(vocabulary, progress, now)

    async def list_vocabulary(
        self,
        user_id: int,
        jlpt_level: Optional[int] = None,
        limit: Optional[int] = None,
        offset: int = 0,
        now: Optional[datetime] = None,
    ) -> VocabularyListResponse:
        """
        List vocabulary in id order, each item with the user's progress.

        Items the user has not started are included with progress=None.

        Args:
            user_id: Learner identifier
            jlpt_level: Only items at this JLPT level (default: all levels)
            limit: Page size (defaults to settings.VOCABULARY_LIST_DEFAULT_LIMIT,
                capped at settings.LIST_MAX_LIMIT)
            offset: Items to skip
            now: Reference time for the due flags (default: current UTC time)

        Raises:
            ValidationError: If offset is negative
        """
        if offset < 0:
            raise ValidationError(
                "Offset must not be negative", details={"offset": offset}
            )
        if limit is None:
            limit = settings.VOCABULARY_LIST_DEFAULT_LIMIT
        limit = max(1, min(limit, settings.LIST_MAX_LIMIT))
        now = now or datetime.now(timezone.utc)

        count_query = select(func.count(Vocabulary.id))
        if jlpt_level is not None:
            count_query = count_query.where(Vocabulary.jlpt_level == jlpt_level)
        count_result = await self.db.execute(count_query)
        total = count_result.scalar() or 0

        query = select(Vocabulary, UserVocabularyProgress).outerjoin(
            UserVocabularyProgress,
            (UserVocabularyProgress.vocabulary_id == Vocabulary.id)
            & (UserVocabularyProgress.user_id == user_id),
        )
        if jlpt_level is not None:
            query = query.where(Vocabulary.jlpt_level == jlpt_level)
        query = query.order_by(Vocabulary.id.asc()).offset(offset).limit(limit)
        result = await self.db.execute(query)

        items = [
            self._to_vocabulary_response(vocabulary, progress, now)
            for vocabulary, progress in result.all()
        ]
        return VocabularyListResponse(
            items=items,
            total=total,
            limit=limit,
            offset=offset,
            has_more=offset + len(items) < total,
        )

    async def get_due_vocabulary(
        self,
        user_id: int,
        limit: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> list[VocabularyResponse]:
        """
        Get items the user has started that are due for review.

        Items are ordered by next_review_date so the most overdue come first.

        Args:
            user_id: Learner identifier
            limit: Maximum items (defaults to settings.REVIEW_DEFAULT_LIMIT,
                capped at settings.REVIEW_MAX_LIMIT)
            now: Reference time (default: current UTC time)
        """
        if limit is None:
            limit = settings.REVIEW_DEFAULT_LIMIT
        limit = max(1, min(limit, settings.REVIEW_MAX_LIMIT))
        now = now or datetime.now(timezone.utc)

        query = (
            select(Vocabulary, UserVocabularyProgress)
            .join(
                UserVocabularyProgress,
                UserVocabularyProgress.vocabulary_id == Vocabulary.id,
            )
            .where(
                UserVocabularyProgress.user_id == user_id,
                UserVocabularyProgress.next_review_date <= now,
            )
            .order_by(UserVocabularyProgress.next_review_date.asc())
            .limit(limit)
        )
        result = await self.db.execute(query)

        return [
            self._to_vocabulary_response(vocabulary, progress, now)
            for vocabulary, progress in result.all()
        ]

    async def start_studying(
        self,
        user_id: int,
        vocabulary_id: int,
        now: Optional[datetime] = None,
    ) -> ProgressResponse:
        """
        Create initial progress so the item enters the user's review queue.

        The new item is due immediately.

        Raises:
            NotFoundError: If the vocabulary item does not exist
            ConflictError: If the user is already studying the item
        """
        now = now or datetime.now(timezone.utc)

        await self._get_vocabulary_or_raise(vocabulary_id)

        if not await self._insert_initial_progress(user_id, vocabulary_id, now):
            raise ConflictError(
                "Already studying this vocabulary",
                details={"vocabulary_id": vocabulary_id},
            )

        progress = await self._get_progress(user_id, vocabulary_id)
        await self.db.commit()

        logger.info(f"User {user_id} started studying vocabulary {vocabulary_id}")

        return self._to_progress_response(progress, now)

    async def submit_review(
        self,
        user_id: int,
        vocabulary_id: int,
        is_correct: Optional[bool] = None,
        quality: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> ReviewResponse:
        """
        Process a review with SM-2.

        Exactly one of `is_correct` and `quality` must be given. A review of
        an item the user never started creates its progress first.

        Args:
            user_id: Learner identifier
            vocabulary_id: Reviewed item
            is_correct: Binary outcome, mapped to quality 4 (True) or 1 (False)
            quality: SM-2 grade 0-5
            now: Review time (default: current UTC time)

        Returns:
            Review response with the updated progress

        Raises:
            ValidationError: If the outcome is missing, ambiguous or out of range
            NotFoundError: If the vocabulary item does not exist
        """
        quality = self._resolve_quality(is_correct, quality)
        now = now or datetime.now(timezone.utc)

        progress = await self._get_progress(user_id, vocabulary_id, for_update=True)
        if progress is None:
            await self._get_vocabulary_or_raise(vocabulary_id)
            # A concurrent first review may win the insert; either way the
            # row exists afterwards and the lock below orders the reviews.
            await self._insert_initial_progress(user_id, vocabulary_id, now)
            progress = await self._get_progress(
                user_id, vocabulary_id, for_update=True
            )

        before = progress_to_state(progress)
        after = compute_next_review(before, quality, now)
        apply_state(progress, after)

        await self.progress_service.update_study_streak(user_id, now.date())

        await self.db.commit()
        await self.db.refresh(progress)

        was_correct = after.correct_reviews > before.correct_reviews
        logger.info(
            f"Reviewed vocabulary {vocabulary_id} for user {user_id}: "
            f"quality={quality}, interval {before.interval} -> {after.interval} days, "
            f"ease {before.ease_factor:.2f} -> {after.ease_factor:.2f}"
        )

        return ReviewResponse(
            success=True,
            progress=self._to_progress_response(progress, now),
            next_review_date=after.next_review_date,
            message=(
                "Great job! Keep it up!"
                if was_correct
                else "Don't worry, you'll get it next time!"
            ),
        )

    async def get_review_stats(
        self,
        user_id: int,
        vocabulary_id: int,
        now: Optional[datetime] = None,
    ) -> ReviewStatsResponse:
        """
        Get review statistics for one item.

        Raises:
            NotFoundError: If the user has no progress for the item
        """
        now = now or datetime.now(timezone.utc)
        progress = await self._get_progress(user_id, vocabulary_id)
        if progress is None:
            raise NotFoundError(
                "Progress not found",
                details={"user_id": user_id, "vocabulary_id": vocabulary_id},
            )

        stats = get_review_stats(progress_to_state(progress), now)
        return ReviewStatsResponse.model_validate(stats)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _resolve_quality(
        is_correct: Optional[bool],
        quality: Optional[int],
    ) -> int:
        """Validate the review outcome and convert it to an SM-2 grade."""
        if (is_correct is None) == (quality is None):
            raise ValidationError("Provide exactly one of is_correct or quality")
        if quality is None:
            return int(quality_from_boolean(is_correct))
        if isinstance(quality, bool) or not isinstance(quality, int):
            raise ValidationError(
                "Quality must be an integer", details={"quality": quality}
            )
        if not 0 <= quality <= 5:
            raise ValidationError(
                "Quality must be between 0 and 5", details={"quality": quality}
            )
        return int(quality)

    async def _get_vocabulary_or_raise(self, vocabulary_id: int) -> Vocabulary:
        result = await self.db.execute(
            select(Vocabulary).where(Vocabulary.id == vocabulary_id)
        )
        vocabulary = result.scalar_one_or_none()
        if vocabulary is None:
            raise NotFoundError(
                "Vocabulary not found", details={"vocabulary_id": vocabulary_id}
            )
        return vocabulary

    async def _get_progress(
        self,
        user_id: int,
        vocabulary_id: int,
        for_update: bool = False,
    ) -> Optional[UserVocabularyProgress]:
        query = select(UserVocabularyProgress).where(
            UserVocabularyProgress.user_id == user_id,
            UserVocabularyProgress.vocabulary_id == vocabulary_id,
        )
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def _insert_initial_progress(
        self,
        user_id: int,
        vocabulary_id: int,
        now: datetime,
    ) -> bool:
        """
        Insert initial progress unless the row already exists.

        Returns:
            True if this call created the row
        """
        result = await self.db.execute(
            insert(UserVocabularyProgress)
            .values(
                user_id=user_id,
                vocabulary_id=vocabulary_id,
                **state_to_columns(initialize_progress(now)),
            )
            .on_conflict_do_nothing(index_elements=["user_id", "vocabulary_id"])
            .returning(UserVocabularyProgress.id)
        )
        return result.scalar_one_or_none() is not None

    def _to_progress_response(
        self,
        progress: UserVocabularyProgress,
        now: datetime,
    ) -> ProgressResponse:
        """Convert database model to response model."""
        state = progress_to_state(progress)
        stats = get_review_stats(state, now)
        return ProgressResponse(
            id=progress.id,
            ease_factor=progress.ease_factor,
            interval_days=progress.interval,
            repetitions=progress.repetitions,
            next_review_date=progress.next_review_date,
            last_reviewed_at=progress.last_reviewed_at,
            total_reviews=progress.total_reviews,
            correct_reviews=progress.correct_reviews,
            success_rate=stats.success_rate,
            is_due=is_due(state, now),
        )

    def _to_vocabulary_response(
        self,
        vocabulary: Vocabulary,
        progress: Optional[UserVocabularyProgress],
        now: datetime,
    ) -> VocabularyResponse:
        """Convert database models to response model."""
        return VocabularyResponse(
            id=vocabulary.id,
            word=vocabulary.word,
            reading=vocabulary.reading,
            meaning=vocabulary.meaning,
            part_of_speech=vocabulary.part_of_speech,
            jlpt_level=vocabulary.jlpt_level,
            example_sentence=vocabulary.example_sentence,
            example_translation=vocabulary.example_translation,
            audio_url=vocabulary.audio_url,
            progress=(
                self._to_progress_response(progress, now) if progress else None
            ),
        )

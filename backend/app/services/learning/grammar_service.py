"""
Grammar Lesson Service

Serves grammar lessons with their example sentences and tracks which
lessons each user has completed.

Completion is an upsert on user_grammar_progress (one row per user and
lesson), so marking a lesson twice, or from two requests at once, leaves a
single completed row.

Usage:
    from app.services.learning import GrammarService

    service = GrammarService(db_session)
    lessons = await service.list_lessons(user_id=1, jlpt_level=5)
    progress = await service.mark_completed(user_id=1, lesson_id=3)
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config.settings import settings
from app.db.models import GrammarLesson
from app.db.models_learning import UserGrammarProgress
from app.errors import NotFoundError, ValidationError
from app.models.learning import (
    GrammarExampleResponse,
    GrammarLessonListResponse,
    GrammarLessonResponse,
    GrammarProgressResponse,
)

logger = logging.getLogger(__name__)


class GrammarService:
    """
    Service for grammar lessons and per-user completion.

    Provides:
    - Paginated lesson listing, optionally by JLPT level
    - Single lesson lookup with the user's progress
    - Marking lessons as completed
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_lessons(
        self,
        user_id: int,
        jlpt_level: Optional[int] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> GrammarLessonListResponse:
        """
        List lessons in course order with examples and the user's progress.

        Args:
            user_id: Learner identifier
            jlpt_level: Only lessons at this JLPT level (default: all levels)
            limit: Page size (defaults to settings.GRAMMAR_LIST_DEFAULT_LIMIT,
                capped at settings.LIST_MAX_LIMIT)
            offset: Lessons to skip

        Raises:
            ValidationError: If offset is negative
        """
        if offset < 0:
            raise ValidationError(
                "Offset must not be negative", details={"offset": offset}
            )
        if limit is None:
            limit = settings.GRAMMAR_LIST_DEFAULT_LIMIT
        limit = max(1, min(limit, settings.LIST_MAX_LIMIT))

        count_query = select(func.count(GrammarLesson.id))
        if jlpt_level is not None:
            count_query = count_query.where(GrammarLesson.jlpt_level == jlpt_level)
        count_result = await self.db.execute(count_query)
        total = count_result.scalar() or 0

        query = (
            select(GrammarLesson, UserGrammarProgress)
            .outerjoin(
                UserGrammarProgress,
                (UserGrammarProgress.grammar_lesson_id == GrammarLesson.id)
                & (UserGrammarProgress.user_id == user_id),
            )
            .options(selectinload(GrammarLesson.examples))
        )
        if jlpt_level is not None:
            query = query.where(GrammarLesson.jlpt_level == jlpt_level)
        query = (
            query.order_by(
                GrammarLesson.lesson_order.asc().nulls_last(),
                GrammarLesson.id.asc(),
            )
            .offset(offset)
            .limit(limit)
        )
        result = await self.db.execute(query)

        items = [
            self._to_lesson_response(lesson, progress)
            for lesson, progress in result.all()
        ]
        return GrammarLessonListResponse(
            items=items,
            total=total,
            limit=limit,
            offset=offset,
            has_more=offset + len(items) < total,
        )

    async def get_lesson(self, user_id: int, lesson_id: int) -> GrammarLessonResponse:
        """
        Get a lesson with its examples and the user's progress, if any.

        Raises:
            NotFoundError: If the lesson does not exist
        """
        lesson = await self._get_lesson_or_raise(lesson_id)
        progress = await self._get_progress(user_id, lesson_id)
        return self._to_lesson_response(lesson, progress)

    async def mark_completed(
        self,
        user_id: int,
        lesson_id: int,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> GrammarProgressResponse:
        """
        Mark a lesson as completed for the user.

        Marking an already completed lesson refreshes completed_at. Existing
        notes are kept unless new notes are given.

        Raises:
            NotFoundError: If the lesson does not exist
        """
        now = now or datetime.now(timezone.utc)
        await self._get_lesson_or_raise(lesson_id)

        stmt = insert(UserGrammarProgress).values(
            user_id=user_id,
            grammar_lesson_id=lesson_id,
            completed=True,
            completed_at=now,
            notes=notes,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "grammar_lesson_id"],
            set_={
                "completed": True,
                "completed_at": now,
                "notes": func.coalesce(stmt.excluded.notes, UserGrammarProgress.notes),
                "updated_at": now,
            },
        )
        await self.db.execute(stmt)

        progress = await self._get_progress(user_id, lesson_id)
        await self.db.commit()

        logger.info(f"User {user_id} completed grammar lesson {lesson_id}")

        return GrammarProgressResponse.model_validate(progress)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _get_lesson_or_raise(self, lesson_id: int) -> GrammarLesson:
        result = await self.db.execute(
            select(GrammarLesson)
            .where(GrammarLesson.id == lesson_id)
            .options(selectinload(GrammarLesson.examples))
        )
        lesson = result.scalar_one_or_none()
        if lesson is None:
            raise NotFoundError(
                "Grammar lesson not found", details={"lesson_id": lesson_id}
            )
        return lesson

    async def _get_progress(
        self,
        user_id: int,
        lesson_id: int,
    ) -> Optional[UserGrammarProgress]:
        result = await self.db.execute(
            select(UserGrammarProgress)
            .where(
                UserGrammarProgress.user_id == user_id,
                UserGrammarProgress.grammar_lesson_id == lesson_id,
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    def _to_lesson_response(
        self,
        lesson: GrammarLesson,
        progress: Optional[UserGrammarProgress],
    ) -> GrammarLessonResponse:
        """Convert database models to response model."""
        return GrammarLessonResponse(
            id=lesson.id,
            title=lesson.title,
            grammar_point=lesson.grammar_point,
            explanation=lesson.explanation,
            usage_notes=lesson.usage_notes,
            jlpt_level=lesson.jlpt_level,
            lesson_order=lesson.lesson_order,
            examples=[
                GrammarExampleResponse.model_validate(example)
                for example in lesson.examples
            ],
            progress=(
                GrammarProgressResponse.model_validate(progress) if progress else None
            ),
        )

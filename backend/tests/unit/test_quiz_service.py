"""
Unit tests for QuizService.

Tests starting sessions, grading submissions, result lookup and history
against a mocked database session.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.dialects import postgresql

from app.db.models import Quiz, QuizQuestion
from app.db.models_learning import QuizAnswer, QuizSession
from app.enums.learning import QuizSessionStatus
from app.errors import (
    AuthorizationError,
    InvalidSessionStateError,
    NotFoundError,
    ValidationError,
)
from app.services.learning.quiz_service import QuizService

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def _result(value):
    """Mock result of db.execute() for a single-row query."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


def _scalars(values):
    """Mock result of db.execute() for a multi-row query."""
    result = MagicMock()
    result.scalars.return_value.all.return_value = values
    return result


def make_quiz(**overrides) -> Quiz:
    values = {
        "id": 3,
        "title": "Basic Vocabulary Quiz",
        "description": "Test your knowledge of basic JLPT N5 vocabulary",
        "quiz_type": "vocabulary",
        "jlpt_level": 5,
        "passing_score": 50,
    }
    values.update(overrides)
    return Quiz(**values)


def make_questions() -> list[QuizQuestion]:
    return [
        QuizQuestion(
            id=1,
            quiz_id=3,
            question_type="multiple_choice",
            question_text="What does '私' (わたし) mean?",
            correct_answer="A",
            option_a="I, me",
            option_b="You",
            option_c="He, she",
            option_d="We",
            explanation="私 (わたし) means 'I' or 'me'.",
            points=1,
            question_order=1,
        ),
        QuizQuestion(
            id=2,
            quiz_id=3,
            question_type="fill_in_blank",
            question_text="Reading of 学校?",
            correct_answer="B",
            points=2,
            question_order=2,
        ),
    ]


def make_session(**overrides) -> QuizSession:
    values = {"id": 10, "user_id": 1, "quiz_id": 3, "started_at": T0}
    values.update(overrides)
    return QuizSession(**values)


@pytest.fixture
def progress_service():
    mock = MagicMock()
    mock.update_study_streak = AsyncMock()
    return mock


@pytest.fixture
def service(mock_db_session, progress_service):
    return QuizService(mock_db_session, progress_service=progress_service)


class TestQuizServiceInitialization:
    """Tests for QuizService construction."""

    @patch("app.services.learning.quiz_service.ProgressService")
    def test_default_progress_service(self, mock_progress_class):
        mock_db = MagicMock()

        service = QuizService(mock_db)

        mock_progress_class.assert_called_once_with(mock_db)
        assert service.progress_service is mock_progress_class.return_value


class TestQuizzes:
    """Tests for quiz lookup."""

    @pytest.mark.asyncio
    async def test_get_quiz(self, service, mock_db_session):
        mock_db_session.execute.return_value = _result(make_quiz())

        quiz = await service.get_quiz(3)

        assert quiz.title == "Basic Vocabulary Quiz"
        assert quiz.passing_score == 50

    @pytest.mark.asyncio
    async def test_get_quiz_not_found(self, service, mock_db_session):
        mock_db_session.execute.return_value = _result(None)

        with pytest.raises(NotFoundError):
            await service.get_quiz(404)

    @pytest.mark.asyncio
    async def test_list_quizzes_by_level(self, service, mock_db_session):
        mock_db_session.execute.return_value = _scalars([make_quiz()])

        quizzes = await service.list_quizzes(jlpt_level=5)

        assert [q.id for q in quizzes] == [3]
        statement = mock_db_session.execute.call_args.args[0]
        assert "jlpt_level" in str(statement.whereclause)


class TestStartQuizSession:
    """Tests for starting an attempt."""

    @pytest.mark.asyncio
    async def test_start(self, service, mock_db_session):
        """Test a session is created and answers are hidden."""
        mock_db_session.execute.side_effect = [
            _result(make_quiz()),
            _scalars(make_questions()),
        ]

        async def assign_id(obj):
            obj.id = 10

        mock_db_session.refresh = AsyncMock(side_effect=assign_id)

        started = await service.start_quiz_session(1, 3, now=T0)

        created = mock_db_session.add.call_args.args[0]
        assert isinstance(created, QuizSession)
        assert created.user_id == 1
        assert created.started_at == T0
        assert created.completed_at is None

        assert started.session_id == 10
        assert started.started_at == T0
        assert [q.id for q in started.questions] == [1, 2]
        assert started.questions[0].options == ["I, me", "You", "He, she", "We"]
        assert started.questions[1].options == []
        assert "correct_answer" not in started.questions[0].model_dump()
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unknown_quiz(self, service, mock_db_session):
        mock_db_session.execute.return_value = _result(None)

        with pytest.raises(NotFoundError):
            await service.start_quiz_session(1, 404, now=T0)

    @pytest.mark.asyncio
    async def test_quiz_without_questions(self, service, mock_db_session):
        mock_db_session.execute.side_effect = [_result(make_quiz()), _scalars([])]

        with pytest.raises(ValidationError):
            await service.start_quiz_session(1, 3, now=T0)

        mock_db_session.add.assert_not_called()


class TestSubmitQuizAnswers:
    """Tests for the grading transition."""

    def _setup(self, mock_db_session, session=None, quiz=None):
        mock_db_session.execute.side_effect = [
            _result(session or make_session()),
            _result(quiz or make_quiz()),
            _scalars(make_questions()),
        ]

    @pytest.mark.asyncio
    async def test_grades_and_completes(
        self, service, mock_db_session, progress_service
    ):
        """Test one of two answers right against a 50% passing score."""
        session = make_session()
        self._setup(mock_db_session, session=session)
        completed = T0 + timedelta(minutes=2, seconds=5)

        result = await service.submit_quiz_answers(
            1, 10, {1: "A", 2: "C"}, now=completed
        )

        assert result.score == 1
        assert result.total_points == 3
        assert round(result.percentage, 2) == 33.33
        assert result.passed is False
        assert result.total_questions == 2
        assert result.time_spent_seconds == 125
        assert result.completed_at == completed
        assert [(a.question_id, a.is_correct) for a in result.answers] == [
            (1, True),
            (2, False),
        ]
        assert result.questions[0].correct_answer == "A"

        assert session.completed_at == completed
        assert session.score == 1
        assert session.total_points == 3
        assert session.passed is False
        assert session.time_spent_seconds == 125

        answer_rows = mock_db_session.add_all.call_args.args[0]
        assert all(isinstance(a, QuizAnswer) for a in answer_rows)
        assert [a.user_answer for a in answer_rows] == ["A", "C"]

        progress_service.update_study_streak.assert_awaited_once_with(
            1, completed.date()
        )
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_session_locked_for_update(self, service, mock_db_session):
        self._setup(mock_db_session)

        await service.submit_quiz_answers(1, 10, {1: "A"}, now=T0)

        statement = mock_db_session.execute.call_args_list[0].args[0]
        assert "FOR UPDATE" in str(statement.compile(dialect=postgresql.dialect()))

    @pytest.mark.asyncio
    async def test_attempted_only_scoring(self, service, mock_db_session):
        """Test skipped questions are excluded from the total by default."""
        self._setup(mock_db_session)

        result = await service.submit_quiz_answers(1, 10, {1: "A"}, now=T0)

        assert result.total_points == 1
        assert result.percentage == 100.0
        assert result.passed is True

    @pytest.mark.asyncio
    @patch("app.services.learning.quiz_service.settings")
    async def test_full_bank_scoring(self, mock_settings, service, mock_db_session):
        """Test the settings toggle scores against every question."""
        mock_settings.QUIZ_SCORE_OVER_ATTEMPTED_ONLY = False
        self._setup(mock_db_session)

        result = await service.submit_quiz_answers(1, 10, {1: "A"}, now=T0)

        assert result.total_points == 3
        assert result.passed is False

    @pytest.mark.asyncio
    async def test_unknown_question_ignored(self, service, mock_db_session):
        self._setup(mock_db_session)

        result = await service.submit_quiz_answers(1, 10, {1: "A", 99: "A"}, now=T0)

        assert [a.question_id for a in result.answers] == [1]
        assert len(mock_db_session.add_all.call_args.args[0]) == 1

    @pytest.mark.asyncio
    async def test_already_completed(self, service, mock_db_session):
        """Test a second submission is rejected."""
        mock_db_session.execute.return_value = _result(
            make_session(completed_at=T0)
        )

        with pytest.raises(InvalidSessionStateError):
            await service.submit_quiz_answers(1, 10, {1: "A"}, now=T0)

        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_other_users_session(self, service, mock_db_session):
        mock_db_session.execute.return_value = _result(make_session(user_id=2))

        with pytest.raises(AuthorizationError):
            await service.submit_quiz_answers(1, 10, {1: "A"}, now=T0)

    @pytest.mark.asyncio
    async def test_unknown_session(self, service, mock_db_session):
        mock_db_session.execute.return_value = _result(None)

        with pytest.raises(NotFoundError):
            await service.submit_quiz_answers(1, 10, {1: "A"}, now=T0)

    @pytest.mark.asyncio
    async def test_no_answers(self, service, mock_db_session):
        with pytest.raises(ValidationError):
            await service.submit_quiz_answers(1, 10, {}, now=T0)

        mock_db_session.execute.assert_not_awaited()


class TestResultsAndHistory:
    """Tests for reading back sessions."""

    @pytest.mark.asyncio
    async def test_get_result(self, service, mock_db_session):
        session = make_session(
            completed_at=T0 + timedelta(seconds=90),
            score=3,
            total_points=3,
            percentage=100.0,
            passed=True,
            time_spent_seconds=90,
        )
        answers = [
            QuizAnswer(
                id=i, quiz_session_id=10, quiz_question_id=i,
                user_answer=answer, is_correct=True,
            )
            for i, answer in [(1, "A"), (2, "B")]
        ]
        mock_db_session.execute.side_effect = [
            _result(session),
            _result(make_quiz()),
            _scalars(make_questions()),
            _scalars(answers),
        ]

        result = await service.get_quiz_session_result(1, 10)

        assert result.passed is True
        assert result.percentage == 100.0
        assert result.time_spent_seconds == 90
        assert len(result.answers) == 2
        assert result.questions[1].explanation is None

    @pytest.mark.asyncio
    async def test_result_of_started_session(self, service, mock_db_session):
        mock_db_session.execute.return_value = _result(make_session())

        with pytest.raises(InvalidSessionStateError):
            await service.get_quiz_session_result(1, 10)

    @pytest.mark.asyncio
    async def test_history(self, service, mock_db_session):
        mock_db_session.execute.return_value = _scalars(
            [
                make_session(id=12, started_at=T0 + timedelta(days=1)),
                make_session(
                    id=11,
                    completed_at=T0 + timedelta(minutes=5),
                    score=2,
                    total_points=3,
                    percentage=66.67,
                    passed=False,
                ),
            ]
        )

        history = await service.get_user_quiz_history(1)

        assert [h.id for h in history] == [12, 11]
        assert history[0].status == QuizSessionStatus.STARTED
        assert history[0].score is None
        assert history[1].status == QuizSessionStatus.COMPLETED
        assert history[1].percentage == 66.67

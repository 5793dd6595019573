"""
Unit tests for the quiz grader.

Tests scoring, pass/fail, handling of unknown question ids, and the
attempted-only scoring policy.
"""

import logging
from datetime import datetime, timedelta, timezone

import pytest

from app.services.learning.quiz_grader import (
    SCORE_OVER_ATTEMPTED_ONLY,
    GradedAnswer,
    QuizQuestion,
    compute_time_spent_seconds,
    grade_submission,
)


@pytest.fixture
def questions():
    """Two questions worth 1 and 2 points."""
    return [
        QuizQuestion(id=1, correct_answer="A", points=1),
        QuizQuestion(id=2, correct_answer="B", points=2),
    ]


class TestGradeSubmission:
    """Tests for basic scoring."""

    def test_partial_credit_fails(self, questions):
        """Test one of two answers right, below the passing score."""
        result = grade_submission(questions, {1: "A", 2: "C"}, passing_score_percent=50)

        assert result.earned_points == 1
        assert result.total_points == 3
        assert round(result.percentage, 2) == 33.33
        assert result.passed is False

    def test_all_correct_passes(self, questions):
        """Test every answer right."""
        result = grade_submission(questions, {1: "A", 2: "B"}, passing_score_percent=70)

        assert result.earned_points == 3
        assert result.total_points == 3
        assert result.percentage == 100.0
        assert result.passed is True

    def test_passing_score_is_inclusive(self):
        """Test a percentage equal to the threshold passes."""
        qs = [QuizQuestion(id=i, correct_answer="A") for i in range(1, 5)]

        result = grade_submission(
            qs, {1: "A", 2: "A", 3: "A", 4: "B"}, passing_score_percent=75
        )

        assert result.percentage == 75.0
        assert result.passed is True

    def test_per_answer_correctness(self, questions):
        """Test graded answers keep the submitted values."""
        result = grade_submission(questions, {1: "A", 2: "C"}, passing_score_percent=50)

        assert result.answers == (
            GradedAnswer(question_id=1, submitted_answer="A", is_correct=True),
            GradedAnswer(question_id=2, submitted_answer="C", is_correct=False),
        )

    @pytest.mark.parametrize("submitted", ["a", " A", "A ", "Ａ"])
    def test_exact_match_only(self, questions, submitted):
        """Test comparison is case- and whitespace-sensitive."""
        result = grade_submission(questions, {1: submitted}, passing_score_percent=50)

        assert result.answers[0].is_correct is False
        assert result.earned_points == 0

    def test_fill_in_blank_answer(self):
        """Test free-text answers are compared verbatim."""
        qs = [QuizQuestion(id=7, correct_answer="がっこう", points=2)]

        result = grade_submission(qs, {7: "がっこう"}, passing_score_percent=70)

        assert result.earned_points == 2
        assert result.passed is True


class TestUnknownQuestions:
    """Tests for answers referencing questions outside the bank."""

    def test_unknown_ids_are_skipped(self, questions):
        """Test unknown ids do not affect the score."""
        result = grade_submission(
            questions, {1: "A", 99: "A"}, passing_score_percent=50
        )

        assert result.earned_points == 1
        assert result.total_points == 1
        assert [a.question_id for a in result.answers] == [1]

    def test_unknown_ids_are_logged(self, questions, caplog):
        """Test a warning names the skipped question."""
        with caplog.at_level(logging.WARNING):
            grade_submission(questions, {42: "A"}, passing_score_percent=50)

        assert "42" in caplog.text

    def test_only_unknown_ids(self, questions):
        """Test a submission with nothing scorable yields zero, not an error."""
        result = grade_submission(questions, {42: "A"}, passing_score_percent=50)

        assert result.total_points == 0
        assert result.percentage == 0.0
        assert result.passed is False
        assert result.answers == ()


class TestScoringPolicy:
    """Tests for the attempted-only scoring policy."""

    def test_default_policy_is_attempted_only(self):
        assert SCORE_OVER_ATTEMPTED_ONLY is True

    def test_unanswered_questions_not_counted(self, questions):
        """Test skipping a question can still score 100%."""
        result = grade_submission(questions, {1: "A"}, passing_score_percent=70)

        assert result.total_points == 1
        assert result.percentage == 100.0
        assert result.passed is True

    def test_full_bank_policy(self, questions):
        """Test scoring against every question when the toggle is off."""
        result = grade_submission(
            questions,
            {1: "A"},
            passing_score_percent=70,
            score_over_attempted_only=False,
        )

        assert result.earned_points == 1
        assert result.total_points == 3
        assert result.passed is False

    def test_zero_point_bank(self):
        """Test percentage is 0 when there are no points to score."""
        qs = [QuizQuestion(id=1, correct_answer="A", points=0)]

        result = grade_submission(qs, {1: "A"}, passing_score_percent=0)

        assert result.total_points == 0
        assert result.percentage == 0.0
        # 0 >= 0
        assert result.passed is True

    def test_empty_submission(self, questions):
        result = grade_submission(questions, {}, passing_score_percent=50)

        assert result.earned_points == 0
        assert result.percentage == 0.0
        assert result.passed is False


class TestTimeSpent:
    """Tests for session duration."""

    def test_whole_seconds(self):
        started = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        completed = started + timedelta(minutes=3, seconds=7, milliseconds=900)

        assert compute_time_spent_seconds(started, completed) == 187

    def test_not_completed(self):
        started = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

        assert compute_time_spent_seconds(started, None) == 0

"""
SM-2 Spaced Repetition Scheduler

Pure implementation of the SuperMemo-2 scheduling algorithm used to decide
when a vocabulary item should next be reviewed and how its ease evolves.

Key Concepts:
- Ease factor (EF): Multiplier controlling interval growth, floored at 1.3
- Interval: Whole days until the next review
- Repetitions: Consecutive successful reviews (quality >= 3)

Transition rules:
    failure (q < 3):  repetitions = 0, interval = 1
    success (q >= 3): interval = 1, 6, then round(interval * EF),
                      computed from the pre-update repetitions/interval/EF
    always:           EF += 0.1 - (5 - q) * (0.08 + (5 - q) * 0.02), floor 1.3
    always:           next_review_date = now + interval days

The functions here never read the clock and never mutate their inputs, so
they can be called concurrently and replayed deterministically. Loading and
saving progress rows is the caller's job.

Usage:
    from app.services.learning.sm2 import compute_next_review, initialize_progress

    state = initialize_progress(now)
    state = compute_next_review(state, ReviewQuality.CORRECT_HESITANT, now)
"""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from app.enums.learning import ReviewQuality

DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
INITIAL_INTERVAL_DAYS = 1
SECOND_INTERVAL_DAYS = 6
PASSING_QUALITY = ReviewQuality.CORRECT_HARD


@dataclass(frozen=True)
class ReviewState:
    """
    SM-2 scheduling state for one user x vocabulary item.

    Maps to the evolving columns of the user_vocabulary_progress table.

    Invariants: ease_factor >= 1.3, interval >= 1, repetitions >= 0,
    total_reviews >= correct_reviews >= 0, and next_review_date is always
    the review time plus interval days.
    """

    next_review_date: datetime
    ease_factor: float = DEFAULT_EASE_FACTOR
    interval: int = INITIAL_INTERVAL_DAYS
    repetitions: int = 0
    last_reviewed_at: Optional[datetime] = None
    total_reviews: int = 0
    correct_reviews: int = 0


@dataclass(frozen=True)
class ReviewStats:
    """Display statistics derived from a ReviewState at a point in time."""

    success_rate: float
    total_reviews: int
    correct_reviews: int
    current_interval_days: int
    repetitions: int
    ease_factor: float
    days_since_last_review: Optional[int]
    days_until_next_review: int
    is_due: bool


def round_half_away_from_zero(value: float) -> int:
    """
    Round to the nearest integer, with halves rounded away from zero.

    Python's built-in round() uses banker's rounding (round(2.5) == 2),
    which would shorten some intervals relative to stored progress data.
    """
    return int(Decimal(value).to_integral_value(rounding=ROUND_HALF_UP))


def initialize_progress(now: datetime) -> ReviewState:
    """
    Create the starting state for a user who begins studying an item.

    The item is due immediately because next_review_date == now.
    """
    return ReviewState(next_review_date=now)


def compute_next_review(
    state: ReviewState,
    quality: int,
    now: datetime,
) -> ReviewState:
    """
    Apply one review to a scheduling state.

    Args:
        state: Current state (must satisfy the ReviewState invariants).
        quality: Recall grade 0-5. Callers validate the range; an
            out-of-range value is a programming error.
        now: Review timestamp. Becomes last_reviewed_at and the base for
            next_review_date.

    Returns:
        A new ReviewState. The input state is left untouched.

    Example:
        >>> start = initialize_progress(t0)
        >>> after = compute_next_review(start, 4, t0)
        >>> after.repetitions, after.interval
        (1, 1)
    """
    quality = int(quality)
    success = quality >= PASSING_QUALITY

    if not success:
        repetitions = 0
        interval = INITIAL_INTERVAL_DAYS
    else:
        if state.repetitions == 0:
            interval = INITIAL_INTERVAL_DAYS
        elif state.repetitions == 1:
            interval = SECOND_INTERVAL_DAYS
        else:
            # I(n) = I(n-1) * EF, using the EF from before this review
            interval = round_half_away_from_zero(state.interval * state.ease_factor)
        repetitions = state.repetitions + 1

    # EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)), applied on failure too
    q = float(quality)
    ease_factor = state.ease_factor + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))
    if ease_factor < MIN_EASE_FACTOR:
        ease_factor = MIN_EASE_FACTOR

    return replace(
        state,
        ease_factor=ease_factor,
        interval=interval,
        repetitions=repetitions,
        next_review_date=now + timedelta(days=interval),
        last_reviewed_at=now,
        total_reviews=state.total_reviews + 1,
        correct_reviews=state.correct_reviews + (1 if success else 0),
    )


def quality_from_boolean(is_correct: bool) -> ReviewQuality:
    """
    Map a binary correct/incorrect signal onto the SM-2 quality scale.

    Correct answers count as "correct after hesitation" (4), incorrect ones
    as "incorrect" (1).
    """
    if is_correct:
        return ReviewQuality.CORRECT_HESITANT
    return ReviewQuality.INCORRECT


def is_due(state: ReviewState, now: datetime) -> bool:
    """Whether the item should be reviewed at `now`."""
    return now >= state.next_review_date


def get_review_stats(state: ReviewState, now: datetime) -> ReviewStats:
    """
    Summarize a progress state for display.

    Day counts are whole days, truncated. days_until_next_review is
    floored at 0 for overdue items.
    """
    success_rate = 0.0
    if state.total_reviews > 0:
        success_rate = state.correct_reviews / state.total_reviews * 100

    days_since_last_review = None
    if state.last_reviewed_at is not None:
        days_since_last_review = int(
            (now - state.last_reviewed_at).total_seconds() / 86400
        )

    days_until_next_review = int(
        (state.next_review_date - now).total_seconds() / 86400
    )
    if days_until_next_review < 0:
        days_until_next_review = 0

    return ReviewStats(
        success_rate=success_rate,
        total_reviews=state.total_reviews,
        correct_reviews=state.correct_reviews,
        current_interval_days=state.interval,
        repetitions=state.repetitions,
        ease_factor=state.ease_factor,
        days_since_last_review=days_since_last_review,
        days_until_next_review=days_until_next_review,
        is_due=is_due(state, now),
    )

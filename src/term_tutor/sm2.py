"""SM-2 spaced repetition algorithm."""
import math
from datetime import datetime, timedelta
from typing import Optional

from term_tutor.errors import InvalidRatingError
from term_tutor.models import PASSING_RATING, ProgressRecord

DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
# First successful review of a brand-new term rated 5 skips ahead.
PERFECT_FIRST_INTERVAL = 4


def validate_rating(rating) -> int:
    if isinstance(rating, bool) or not isinstance(rating, int) or not 0 <= rating <= 5:
        raise InvalidRatingError(rating)
    return int(rating)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def advance(
    previous: Optional[ProgressRecord],
    rating: int,
    now: datetime,
    term_id: Optional[str] = None,
) -> ProgressRecord:
    """Calculate the next review state for a term using SM-2.

    Args:
        previous: Current progress, or None if the term was never rated
        rating: Quality 0-5 (0=blackout, 5=perfect)
        now: Instant of the rating; next_review_at is derived from it
        term_id: Required when previous is None

    Returns:
        A new ProgressRecord. previous is never mutated.

    Raises:
        InvalidRatingError: rating is not an integer in 0..5.
    """
    quality = validate_rating(rating)

    if previous is None:
        if term_id is None:
            raise ValueError("term_id is required for a term with no progress")
        repetitions, interval, ease_factor = 0, 0, DEFAULT_EASE_FACTOR
    else:
        term_id = previous.term_id
        repetitions = previous.repetition
        interval = previous.interval
        ease_factor = previous.ease_factor

    if quality >= PASSING_RATING:
        if repetitions == 0:
            new_interval = PERFECT_FIRST_INTERVAL if quality == 5 else 1
        elif repetitions == 1:
            new_interval = 6
        else:
            # Uses the ease factor from before this review
            new_interval = _round_half_up(interval * ease_factor)
        new_repetitions = repetitions + 1
    else:
        # Incorrect: restart short-term
        new_repetitions = 0
        new_interval = 1

    new_ef = ease_factor + (0.1 - (5 - quality) * (0.08 + (5 - quality) * 0.02))
    new_ef = max(MIN_EASE_FACTOR, new_ef)

    return ProgressRecord(
        term_id=term_id,
        interval=new_interval,
        repetition=new_repetitions,
        ease_factor=new_ef,
        next_review_at=now + timedelta(days=new_interval),
    )


def is_due(progress: Optional[ProgressRecord], now: datetime) -> bool:
    """New terms are always due; otherwise due once next_review_at has passed."""
    if progress is None:
        return True
    return now >= progress.next_review_at

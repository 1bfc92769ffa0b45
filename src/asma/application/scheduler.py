"""
SM-2 based review scheduler.

Every function here is a pure state transition: it takes a MemoryState and
returns a new one. The caller supplies ``now`` and persists the result.
"""

import math
from dataclasses import replace
from datetime import datetime, timedelta

from asma.domain.constants import (
    GRADUATING_INTERVALS,
    LAPSE_INTERVAL_FACTOR,
    MAX_QUALITY,
    MIN_EASE_FACTOR,
    MIN_QUALITY,
    PASSING_QUALITY,
)
from asma.domain.models import MemoryState

ONE_DAY = timedelta(days=1)


def clamp_quality(quality: int) -> int:
    """Out-of-range ratings are clamped into 0..5 rather than rejected."""
    return max(MIN_QUALITY, min(MAX_QUALITY, int(quality)))


def next_ease_factor(ease_factor: float, quality: int) -> float:
    """
    Standard SM-2 ease update.

    Quality 5 raises ease by 0.1, quality 4 leaves it unchanged, quality 3
    lowers it by 0.14. Never drops below 1.3.
    """
    miss = MAX_QUALITY - quality
    return max(MIN_EASE_FACTOR, ease_factor + (0.1 - miss * (0.08 + miss * 0.02)))


def review(state: MemoryState, quality: int, now: datetime) -> MemoryState:
    """
    Apply one review with a 0-5 quality rating.

    Args:
        state: Current state (a fresh state for never-reviewed items).
        quality: Self-rating; values of 3 or more count as a correct recall.
        now: Time of the review.

    Returns:
        The updated MemoryState.
    """
    quality = clamp_quality(quality)

    if quality < PASSING_QUALITY:
        # Soft reset: long intervals shrink to 20% instead of restarting at 1.
        return replace(
            state,
            interval=max(1, math.floor(state.interval * LAPSE_INTERVAL_FACTOR)),
            consecutive_correct=0,
            last_reviewed=now,
            next_review=now + ONE_DAY,
        )

    streak = state.consecutive_correct if state.reviewed else 0
    streak += 1

    if streak <= len(GRADUATING_INTERVALS):
        interval = GRADUATING_INTERVALS[streak - 1]
    else:
        interval = max(1, _round_half_up(state.interval * state.ease_factor))

    return replace(
        state,
        interval=interval,
        ease_factor=next_ease_factor(state.ease_factor, quality),
        consecutive_correct=streak,
        last_reviewed=now,
        next_review=now + interval * ONE_DAY,
    )


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def reset(state: MemoryState, now: datetime) -> MemoryState:
    """Return the item to the "new" stage, due immediately."""
    return MemoryState.fresh(state.item_id, now)

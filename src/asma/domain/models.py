"""
Domain models for the learning engine.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from .constants import (
    DEFAULT_EASE_FACTOR,
    DEFAULT_INTERVAL,
    GRADUATED_INTERVAL,
    LEARNING_THRESHOLD,
    MATURE_INTERVAL_DAYS,
    MIN_EASE_FACTOR,
)


class Stage(str, Enum):
    NEW = "new"
    LEARNING = "learning"
    YOUNG = "young"
    MATURE = "mature"


class ItemType(str, Enum):
    REVIEW = "review"
    NEW = "new"
    REINFORCEMENT = "reinforcement"


def _parse_time(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; values without an offset are read as UTC."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class Item:
    """
    One learnable name from the catalog.

    Attributes:
        id: Stable catalog number (1-99).
        name: Canonical transliteration, e.g. "Ar-Rahman".
        arabic: Arabic script form.
        meaning: English meaning.
        aliases: Accepted alternative spellings.
    """

    id: int
    name: str
    arabic: str
    meaning: str
    aliases: tuple[str, ...] = ()


@dataclass(frozen=True)
class MemoryState:
    """
    Per-item learning record.

    ``stage`` is derived from the numeric fields and cannot be set.

    Attributes:
        item_id: The catalog item this state belongs to.
        interval: Days until the next scheduled review.
        ease_factor: Interval growth multiplier (>= 1.3).
        consecutive_correct: Passing reviews since the last lapse.
        last_reviewed: Time of the last review, None if never reviewed.
        next_review: The item is due once ``now >= next_review``.
    """

    item_id: int
    next_review: datetime
    interval: int = DEFAULT_INTERVAL
    ease_factor: float = DEFAULT_EASE_FACTOR
    consecutive_correct: int = 0
    last_reviewed: datetime | None = None

    def __post_init__(self):
        if self.ease_factor < MIN_EASE_FACTOR:
            object.__setattr__(self, "ease_factor", MIN_EASE_FACTOR)
        if self.last_reviewed is not None and self.interval < 1:
            object.__setattr__(self, "interval", 1)
        if self.consecutive_correct < 0:
            object.__setattr__(self, "consecutive_correct", 0)

    @classmethod
    def fresh(cls, item_id: int, now: datetime) -> "MemoryState":
        """Default state for an item that has never been reviewed."""
        return cls(item_id=item_id, next_review=now)

    @property
    def stage(self) -> Stage:
        if self.last_reviewed is None:
            return Stage.NEW
        if self.consecutive_correct < LEARNING_THRESHOLD or self.interval < GRADUATED_INTERVAL:
            return Stage.LEARNING
        if self.interval < MATURE_INTERVAL_DAYS:
            return Stage.YOUNG
        return Stage.MATURE

    @property
    def reviewed(self) -> bool:
        return self.last_reviewed is not None

    def is_due(self, now: datetime) -> bool:
        return now >= self.next_review

    def to_dict(self) -> dict[str, Any]:
        return {
            "item_id": self.item_id,
            "interval": self.interval,
            "ease_factor": self.ease_factor,
            "consecutive_correct": self.consecutive_correct,
            "last_reviewed": self.last_reviewed.isoformat() if self.last_reviewed else None,
            "next_review": self.next_review.isoformat(),
            "stage": self.stage.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MemoryState":
        # "stage" is ignored on purpose: it is always recomputed.
        last = data.get("last_reviewed")
        return cls(
            item_id=int(data["item_id"]),
            interval=int(data.get("interval", DEFAULT_INTERVAL)),
            ease_factor=float(data.get("ease_factor", DEFAULT_EASE_FACTOR)),
            consecutive_correct=int(data.get("consecutive_correct", 0)),
            last_reviewed=_parse_time(last) if last else None,
            next_review=_parse_time(data["next_review"]),
        )


@dataclass(frozen=True)
class SessionItem:
    """An entry in a composed practice session. Never persisted."""

    item: Item
    state: MemoryState | None
    item_type: ItemType
    priority: int


@dataclass(frozen=True)
class SessionResult:
    """Summary of a completed session, written once at session end."""

    session_id: str
    timestamp: datetime
    duration_seconds: float
    total_items: int
    review_count: int
    new_count: int
    reinforcement_count: int
    correct_count: int

    @property
    def accuracy(self) -> float | None:
        if self.total_items == 0:
            return None
        return self.correct_count / self.total_items

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "timestamp": self.timestamp.isoformat(),
            "duration_seconds": self.duration_seconds,
            "total_items": self.total_items,
            "review_count": self.review_count,
            "new_count": self.new_count,
            "reinforcement_count": self.reinforcement_count,
            "correct_count": self.correct_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionResult":
        return cls(
            session_id=str(data["session_id"]),
            timestamp=_parse_time(data["timestamp"]),
            duration_seconds=float(data["duration_seconds"]),
            total_items=int(data["total_items"]),
            review_count=int(data["review_count"]),
            new_count=int(data["new_count"]),
            reinforcement_count=int(data["reinforcement_count"]),
            correct_count=int(data["correct_count"]),
        )


@dataclass
class ProgressStats:
    """Overall learning progress across the catalog."""

    total: int
    due: int
    new: int
    learning: int
    young: int
    mature: int
    total_sessions: int = 0
    average_accuracy: float | None = None
    recent_sessions: list[SessionResult] = field(default_factory=list)

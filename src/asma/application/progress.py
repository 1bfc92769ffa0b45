"""
Progress calculator for summarizing learning state across the catalog.

This is a pure computation module with no I/O.
"""

from collections import Counter
from collections.abc import Mapping, Sequence
from datetime import datetime

from asma.domain.models import (
    Item,
    ItemType,
    MemoryState,
    ProgressStats,
    SessionItem,
    SessionResult,
    Stage,
)

RECENT_SESSIONS = 5


def calculate_progress(
    items: Sequence[Item],
    states: Mapping[int, MemoryState],
    now: datetime,
    results: Sequence[SessionResult] = (),
) -> ProgressStats:
    """
    Count items per stage and how many are due.

    Items without a MemoryState count as new. States for ids missing from
    the catalog are ignored.
    """
    stages: Counter[Stage] = Counter()
    due = 0

    for item in items:
        state = states.get(item.id)
        if state is None:
            stages[Stage.NEW] += 1
            continue
        stages[state.stage] += 1
        if state.reviewed and state.is_due(now):
            due += 1

    accuracies = [r.accuracy for r in results if r.accuracy is not None]
    average = sum(accuracies) / len(accuracies) if accuracies else None

    return ProgressStats(
        total=len(items),
        due=due,
        new=stages[Stage.NEW],
        learning=stages[Stage.LEARNING],
        young=stages[Stage.YOUNG],
        mature=stages[Stage.MATURE],
        total_sessions=len(results),
        average_accuracy=average,
        recent_sessions=list(results[-RECENT_SESSIONS:]),
    )


def summarize_session(
    session_id: str,
    session: Sequence[SessionItem],
    correct: int,
    started_at: datetime,
    finished_at: datetime,
) -> SessionResult:
    counts = Counter(s.item_type for s in session)
    return SessionResult(
        session_id=session_id,
        timestamp=finished_at,
        duration_seconds=max(0.0, (finished_at - started_at).total_seconds()),
        total_items=len(session),
        review_count=counts[ItemType.REVIEW],
        new_count=counts[ItemType.NEW],
        reinforcement_count=counts[ItemType.REINFORCEMENT],
        correct_count=max(0, min(correct, len(session))),
    )

"""
Session composer for time-budgeted practice sessions.

Builds an ordered session by:
1. Taking the most overdue reviews (up to 70% of the session)
2. Introducing a few never-reviewed items
3. Filling the rest with reinforcement of weak items
"""

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime
from enum import Enum

from asma.domain.constants import (
    FALLBACK_MAX_ITEMS,
    FALLBACK_SECONDS_PER_ITEM,
    MAX_NEW_PER_SESSION,
    MAX_SESSION_ITEMS,
    NEW_PRIORITY,
    REINFORCEMENT_BASE_PRIORITY,
    REINFORCEMENT_THRESHOLD,
    REVIEW_BASE_PRIORITY,
    REVIEW_SHARE,
    SECONDS_PER_ITEM,
)
from asma.domain.models import Item, ItemType, MemoryState, SessionItem

logger = logging.getLogger(__name__)


class SessionOrdering(str, Enum):
    GROUPED = "grouped"  # all reviews, then new, then reinforcement
    INTERLEAVED = "interleaved"  # alternate types to avoid long runs


def max_session_items(target_duration_seconds: int) -> int:
    """
    Number of items that fit the time budget (45s each, at most 20).

    A session always has room for at least one item.
    """
    budget = max(0, target_duration_seconds) // SECONDS_PER_ITEM
    return max(1, min(MAX_SESSION_ITEMS, budget))


def compose(
    items: Sequence[Item],
    states: Mapping[int, MemoryState],
    now: datetime,
    target_duration_seconds: int,
    ordering: SessionOrdering = SessionOrdering.GROUPED,
) -> list[SessionItem]:
    """
    Select and order the items for one practice session.

    Args:
        items: The full catalog, in catalog order.
        states: MemoryState per item id; missing ids are treated as new items.
        now: Current time, used for the due check.
        target_duration_seconds: Desired session length.
        ordering: How item types are arranged in the final session.

    Returns:
        At most ``max_session_items(target_duration_seconds)`` SessionItems,
        never empty when ``items`` is non-empty.
    """
    max_items = max_session_items(target_duration_seconds)
    selected: list[SessionItem] = []
    chosen: set[int] = set()

    # 1. Due reviews, most overdue first (sorted() is stable on catalog order)
    due = [
        (item, states[item.id])
        for item in items
        if item.id in states and states[item.id].reviewed and states[item.id].is_due(now)
    ]
    due = sorted(due, key=lambda pair: pair[1].next_review)

    review_cap = int(max_items * REVIEW_SHARE)
    reviews = due[:review_cap]
    for position, (item, state) in enumerate(reviews):
        selected.append(
            SessionItem(
                item=item,
                state=state,
                item_type=ItemType.REVIEW,
                priority=REVIEW_BASE_PRIORITY + len(reviews) - position,
            )
        )
        chosen.add(item.id)

    # 2. New items
    if len(selected) < max_items:
        unseen = [
            item
            for item in items
            if item.id not in chosen and (item.id not in states or not states[item.id].reviewed)
        ]
        room = min(MAX_NEW_PER_SESSION, max_items - len(selected))
        for item in unseen[:room]:
            selected.append(
                SessionItem(
                    item=item,
                    state=states.get(item.id),
                    item_type=ItemType.NEW,
                    priority=NEW_PRIORITY,
                )
            )
            chosen.add(item.id)

    # 3. Reinforcement of weak items
    if len(selected) < max_items:
        weak = [
            (item, states[item.id])
            for item in items
            if item.id not in chosen
            and item.id in states
            and states[item.id].reviewed
            and states[item.id].consecutive_correct < REINFORCEMENT_THRESHOLD
        ]
        weak = sorted(weak, key=lambda pair: pair[1].consecutive_correct)
        for item, state in weak[: max_items - len(selected)]:
            selected.append(
                SessionItem(
                    item=item,
                    state=state,
                    item_type=ItemType.REINFORCEMENT,
                    priority=REINFORCEMENT_BASE_PRIORITY - state.consecutive_correct,
                )
            )
            chosen.add(item.id)

    if not selected and items:
        logger.debug("No items selected; falling back to first catalog items")
        return _fallback_session(items, states, target_duration_seconds, max_items)

    logger.debug(
        f"Composed session: {len(selected)}/{max_items} items "
        f"({len(reviews)} due of {len(due)} available)"
    )
    return order_session(selected, ordering)


def order_session(
    session: list[SessionItem], ordering: SessionOrdering
) -> list[SessionItem]:
    match ordering:
        case SessionOrdering.GROUPED:
            return sorted(session, key=lambda s: (_type_rank(s.item_type), -s.priority))
        case SessionOrdering.INTERLEAVED:
            return _interleave(session)


def _type_rank(item_type: ItemType) -> int:
    match item_type:
        case ItemType.REVIEW:
            return 0
        case ItemType.NEW:
            return 1
        case ItemType.REINFORCEMENT:
            return 2


def _interleave(session: list[SessionItem]) -> list[SessionItem]:
    """
    Alternate review -> new -> reinforcement, highest priority first,
    avoiding a third consecutive item of the same type when possible.
    """
    remaining = sorted(session, key=lambda s: -s.priority)
    ordered: list[SessionItem] = []

    while remaining:
        wanted = _next_type(ordered)
        pick = next((s for s in remaining if s.item_type == wanted), None)
        if pick is None:
            blocked = _run_type(ordered)
            pick = next((s for s in remaining if s.item_type != blocked), remaining[0])
        ordered.append(pick)
        remaining.remove(pick)

    return ordered


def _run_type(ordered: list[SessionItem]) -> ItemType | None:
    """The type of the last two items if they match, else None."""
    if len(ordered) >= 2 and ordered[-1].item_type == ordered[-2].item_type:
        return ordered[-1].item_type
    return None


def _next_type(ordered: list[SessionItem]) -> ItemType:
    if not ordered:
        return ItemType.REVIEW

    last_two = [s.item_type for s in ordered[-2:]]
    if all(t == ItemType.REVIEW for t in last_two):
        return ItemType.NEW
    if all(t == ItemType.NEW for t in last_two):
        return ItemType.REVIEW

    match last_two[-1]:
        case ItemType.REVIEW:
            return ItemType.NEW
        case ItemType.NEW:
            return ItemType.REINFORCEMENT
        case ItemType.REINFORCEMENT:
            return ItemType.REVIEW


def _fallback_session(
    items: Sequence[Item],
    states: Mapping[int, MemoryState],
    target_duration_seconds: int,
    max_items: int,
) -> list[SessionItem]:
    count = min(FALLBACK_MAX_ITEMS, max(0, target_duration_seconds) // FALLBACK_SECONDS_PER_ITEM)
    count = max(1, min(count, max_items))
    return [
        SessionItem(
            item=item,
            state=states.get(item.id),
            item_type=ItemType.NEW,
            priority=NEW_PRIORITY,
        )
        for item in items[:count]
    ]

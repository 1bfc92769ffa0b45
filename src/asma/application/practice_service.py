"""
Practice Service: Application layer orchestrator.

Reads the catalog and stored states, runs the pure engine (composer,
matcher, scheduler) and writes updated states back to the store.
"""

import logging
from datetime import datetime

from asma.application.id_service import generate_session_id
from asma.application.matcher import matches, quality_from_match
from asma.application.progress import calculate_progress, summarize_session
from asma.application.scheduler import reset, review
from asma.application.session_composer import SessionOrdering, compose
from asma.domain.constants import DEFAULT_TARGET_DURATION
from asma.domain.models import (
    Item,
    MemoryState,
    ProgressStats,
    SessionItem,
    SessionResult,
)
from asma.domain.ports import CatalogProvider, StateStore

logger = logging.getLogger(__name__)


class PracticeService:
    """
    Application service for running practice sessions.

    Follows Dependency Inversion: depends on the CatalogProvider and
    StateStore abstractions, not concrete adapters.
    """

    def __init__(
        self,
        catalog: CatalogProvider,
        store: StateStore,
        target_duration_seconds: int = DEFAULT_TARGET_DURATION,
        ordering: SessionOrdering = SessionOrdering.GROUPED,
    ):
        """
        Args:
            catalog: Source of the item catalog.
            store: Where MemoryStates and session results are kept.
            target_duration_seconds: Default session length.
            ordering: Default arrangement of item types within a session.
        """
        self._catalog = catalog
        self._store = store
        self._items: list[Item] | None = None
        self.target_duration_seconds = target_duration_seconds
        self.ordering = ordering

    async def load_items(self) -> list[Item]:
        """Catalog snapshot, loaded once per service."""
        if self._items is None:
            self._items = await self._catalog.get_items()
            logger.debug(f"Loaded catalog with {len(self._items)} items")
        return self._items

    async def get_item(self, item_id: int) -> Item:
        for item in await self.load_items():
            if item.id == item_id:
                return item
        raise KeyError(f"Unknown item id: {item_id}")

    async def load_states(self) -> dict[int, MemoryState]:
        """All stored states by item id; empty if the store cannot be read."""
        try:
            states = await self._store.get_all()
        except Exception as e:
            logger.warning(f"Failed to load memory states, treating all items as new: {e}")
            return {}
        return {s.item_id: s for s in states}

    async def _load_state(self, item_id: int, now: datetime) -> MemoryState:
        try:
            current = await self._store.get_one(item_id)
        except Exception as e:
            logger.warning(f"Failed to load state for item {item_id}: {e}")
            current = None
        return current or MemoryState.fresh(item_id, now)

    async def build_session(
        self,
        now: datetime,
        target_duration_seconds: int | None = None,
        ordering: SessionOrdering | None = None,
    ) -> list[SessionItem]:
        """
        Compose the next session from a single snapshot of stored states.
        """
        items = await self.load_items()
        states = await self.load_states()
        return compose(
            items,
            states,
            now,
            target_duration_seconds
            if target_duration_seconds is not None
            else self.target_duration_seconds,
            ordering or self.ordering,
        )

    def check_answer(self, answer: str, item: Item) -> bool:
        return matches(answer, item)

    async def rate(self, item_id: int, quality: int, now: datetime) -> MemoryState:
        """
        Apply a 0-5 rating to an item and persist the resulting state.

        A missing state is synthesized as a fresh "new" state. If the store
        write fails, the error is logged and the computed state is still
        returned.
        """
        await self.get_item(item_id)
        current = await self._load_state(item_id, now)
        updated = review(current, quality, now)
        await self._save(updated)
        return updated

    async def answer(self, item_id: int, text: str, now: datetime) -> tuple[bool, MemoryState]:
        """
        Judge a free-text answer and schedule the item accordingly
        (quality 4 when correct, 2 when not).
        """
        item = await self.get_item(item_id)
        correct = self.check_answer(text, item)
        state = await self.rate(item_id, quality_from_match(correct), now)
        return correct, state

    async def reset_item(self, item_id: int, now: datetime) -> MemoryState:
        await self.get_item(item_id)
        fresh = reset(await self._load_state(item_id, now), now)
        await self._save(fresh)
        return fresh

    async def finish_session(
        self,
        session: list[SessionItem],
        correct: int,
        started_at: datetime,
        finished_at: datetime,
    ) -> SessionResult:
        result = summarize_session(
            generate_session_id(), session, correct, started_at, finished_at
        )
        try:
            await self._store.add_session_result(result)
        except Exception as e:
            logger.warning(f"Failed to record session {result.session_id}: {e}")
        return result

    async def progress(self, now: datetime) -> ProgressStats:
        items = await self.load_items()
        states = await self.load_states()
        try:
            results = await self._store.list_session_results()
        except Exception as e:
            logger.warning(f"Failed to load session history: {e}")
            results = []
        return calculate_progress(items, states, now, results)

    async def _save(self, state: MemoryState) -> None:
        try:
            await self._store.put_one(state)
        except Exception as e:
            logger.warning(f"Failed to save state for item {state.item_id}: {e}")

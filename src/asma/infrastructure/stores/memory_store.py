"""In-memory StateStore, used by tests and short-lived server processes."""

from asma.domain.models import MemoryState, SessionResult
from asma.domain.ports import StateStore


class InMemoryStateStore(StateStore):
    def __init__(self, states: list[MemoryState] | None = None):
        self._states: dict[int, MemoryState] = {s.item_id: s for s in states or []}
        self._results: list[SessionResult] = []

    async def get_all(self) -> list[MemoryState]:
        return list(self._states.values())

    async def get_one(self, item_id: int) -> MemoryState | None:
        return self._states.get(item_id)

    async def put_one(self, state: MemoryState) -> None:
        self._states[state.item_id] = state

    async def clear(self) -> None:
        self._states.clear()
        self._results.clear()

    async def add_session_result(self, result: SessionResult) -> None:
        self._results.append(result)

    async def list_session_results(self) -> list[SessionResult]:
        return list(self._results)

"""
Ports (interfaces) for catalog and state access.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod

from .models import Item, MemoryState, SessionResult


class CatalogProvider(ABC):
    """
    Port for loading the immutable list of learnable items.

    Implementations:
        - BundledCatalog: Reads the dataset shipped with the package.
        - RemoteCatalog: Fetches from the Aladhan API, falling back to bundled data.
    """

    @abstractmethod
    async def get_items(self) -> list[Item]:
        """
        Returns:
            All catalog items, ordered by id.
        """
        pass


class StateStore(ABC):
    """
    Port for persisting per-item MemoryState records of one user.

    Retrieval failures must degrade to empty results instead of raising:
    every MemoryState can be rebuilt as a fresh "new" state.

    Implementations:
        - InMemoryStateStore: Process-local dict, used by tests and the server.
        - JsonFileStateStore: One JSON document per user on disk.
    """

    @abstractmethod
    async def get_all(self) -> list[MemoryState]:
        pass

    @abstractmethod
    async def get_one(self, item_id: int) -> MemoryState | None:
        pass

    @abstractmethod
    async def put_one(self, state: MemoryState) -> None:
        """
        Store a state, replacing any previous state for the same item.

        The write is all-or-nothing.
        """
        pass

    @abstractmethod
    async def clear(self) -> None:
        pass

    @abstractmethod
    async def add_session_result(self, result: SessionResult) -> None:
        pass

    @abstractmethod
    async def list_session_results(self) -> list[SessionResult]:
        """
        Returns:
            Recorded session results, oldest first.
        """
        pass

# Domain Package
from .models import (
    Item,
    ItemType,
    MemoryState,
    ProgressStats,
    SessionItem,
    SessionResult,
    Stage,
)
from .ports import CatalogProvider, StateStore

__all__ = [
    "Item",
    "ItemType",
    "MemoryState",
    "ProgressStats",
    "SessionItem",
    "SessionResult",
    "Stage",
    "CatalogProvider",
    "StateStore",
]

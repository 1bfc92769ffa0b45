# Infrastructure State Store Adapters Package
from .json_store import JsonFileStateStore
from .memory_store import InMemoryStateStore

__all__ = ["InMemoryStateStore", "JsonFileStateStore"]

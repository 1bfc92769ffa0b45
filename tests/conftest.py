from datetime import datetime, timezone

import pytest

from asma.domain.models import Item
from asma.infrastructure.stores import InMemoryStateStore


def make_item(item_id: int, name: str, *aliases: str) -> Item:
    return Item(id=item_id, name=name, arabic="", meaning="", aliases=tuple(aliases))


@pytest.fixture
def now():
    return datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def catalog_items():
    """A small catalog of 30 distinct items."""
    return [make_item(i, f"Name{i}") for i in range(1, 31)]


@pytest.fixture
def memory_store():
    return InMemoryStateStore()


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config/state
    monkeypatch.setenv("HOME", str(home))
    for var in (
        "ASMA_STATE_DIR",
        "ASMA_USER_ID",
        "ASMA_CATALOG_SOURCE",
        "ASMA_ORDERING",
        "ASMA_TARGET_DURATION_SECONDS",
        "ASMA_VERBOSE",
    ):
        monkeypatch.delenv(var, raising=False)
    return home

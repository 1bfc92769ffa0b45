import asyncio
import json
from datetime import timedelta
from unittest.mock import patch

import pytest

from asma.application.progress import calculate_progress
from asma.application.session_composer import compose
from asma.domain.models import ItemType, MemoryState, SessionResult
from asma.infrastructure.stores import InMemoryStateStore, JsonFileStateStore

DAY = timedelta(days=1)


@pytest.fixture
def store(tmp_path):
    return JsonFileStateStore(tmp_path / "state")


def reviewed(item_id, now, **kwargs):
    return MemoryState(
        item_id=item_id,
        next_review=now + 3 * DAY,
        interval=3,
        ease_factor=2.6,
        consecutive_correct=2,
        last_reviewed=now,
        **kwargs,
    )


def test_file_per_user(tmp_path):
    assert JsonFileStateStore(tmp_path).path == tmp_path / "local.json"
    assert JsonFileStateStore(tmp_path, "amina").path == tmp_path / "amina.json"
    assert JsonFileStateStore(tmp_path, "../evil user").path == tmp_path / ".._evil_user.json"


@pytest.mark.asyncio
async def test_missing_file_is_empty(store):
    assert await store.get_all() == []
    assert await store.get_one(1) is None
    assert await store.list_session_results() == []


@pytest.mark.asyncio
async def test_put_and_get(store, now):
    state = reviewed(7, now)
    await store.put_one(state)

    assert await store.get_one(7) == state
    assert await store.get_all() == [state]

    # A new instance reads the persisted document
    again = JsonFileStateStore(store.state_dir)
    assert await again.get_one(7) == state


@pytest.mark.asyncio
async def test_put_overwrites_existing(store, now):
    await store.put_one(reviewed(7, now))
    newer = MemoryState.fresh(7, now)
    await store.put_one(newer)
    assert await store.get_all() == [newer]


@pytest.mark.asyncio
async def test_users_are_isolated(tmp_path, now):
    a = JsonFileStateStore(tmp_path, "a")
    b = JsonFileStateStore(tmp_path, "b")
    await a.put_one(reviewed(1, now))
    assert await b.get_all() == []


@pytest.mark.asyncio
async def test_document_layout(store, now):
    await store.put_one(reviewed(3, now))
    doc = json.loads(store.path.read_text())
    assert doc["version"] == 1
    assert doc["states"]["3"]["stage"] == "learning"
    assert doc["sessions"] == []


@pytest.mark.asyncio
async def test_corrupt_file_degrades_to_empty(store, now):
    store.state_dir.mkdir(parents=True)
    store.path.write_text("{not json")
    assert await store.get_all() == []

    # The next write replaces the unreadable document
    await store.put_one(reviewed(1, now))
    assert [s.item_id for s in await store.get_all()] == [1]


@pytest.mark.asyncio
async def test_unexpected_layout_degrades_to_empty(store):
    store.state_dir.mkdir(parents=True)
    store.path.write_text(json.dumps(["a", "list"]))
    assert await store.get_all() == []


@pytest.mark.asyncio
async def test_malformed_records_skipped(store, now):
    good = reviewed(2, now)
    store.state_dir.mkdir(parents=True)
    store.path.write_text(
        json.dumps(
            {
                "version": 1,
                "states": {"1": {"item_id": 1}, "2": good.to_dict()},
                "sessions": [{"session_id": "broken"}],
            }
        )
    )
    assert await store.get_all() == [good]
    assert await store.list_session_results() == []


@pytest.mark.asyncio
async def test_failed_write_keeps_previous_document(store, now):
    first = reviewed(1, now)
    await store.put_one(first)

    with patch("asma.infrastructure.stores.json_store.json.dump", side_effect=OSError("disk full")):
        with pytest.raises(OSError):
            await store.put_one(reviewed(2, now))

    assert await store.get_all() == [first]
    assert [p.name for p in store.state_dir.iterdir()] == ["local.json"]


@pytest.mark.asyncio
async def test_sessions_and_clear(store, now):
    result = SessionResult("session_1", now, 120.0, 3, 1, 1, 1, 2)
    await store.put_one(reviewed(1, now))
    await store.add_session_result(result)

    assert await store.list_session_results() == [result]

    await store.clear()
    assert await store.get_all() == []
    assert await store.list_session_results() == []


@pytest.mark.asyncio
async def test_in_memory_store(now):
    state = reviewed(4, now)
    store = InMemoryStateStore([state])
    assert await store.get_one(4) == state
    assert await store.get_one(5) is None

    fresh = MemoryState.fresh(5, now)
    await store.put_one(fresh)
    assert len(await store.get_all()) == 2

    await store.clear()
    assert await store.get_all() == []


@pytest.mark.asyncio
async def test_concurrent_writes_are_all_kept(store, now):
    await asyncio.gather(*(store.put_one(reviewed(i, now)) for i in range(1, 21)))
    results = [SessionResult(f"s{i}", now, 1.0, 1, 1, 0, 0, 1) for i in range(5)]
    await asyncio.gather(*(store.add_session_result(r) for r in results))

    assert sorted(s.item_id for s in await store.get_all()) == list(range(1, 21))
    assert len(await store.list_session_results()) == 5


@pytest.mark.asyncio
async def test_naive_timestamps_in_file_are_comparable(store, catalog_items, now):
    store.state_dir.mkdir(parents=True)
    store.path.write_text(
        json.dumps(
            {
                "version": 1,
                "states": {
                    "1": {
                        "item_id": 1,
                        "interval": 3,
                        "consecutive_correct": 2,
                        "last_reviewed": "2025-02-25T12:00:00",
                        "next_review": "2025-02-28T12:00:00",
                    }
                },
                "sessions": [],
            }
        )
    )
    states = {s.item_id: s for s in await store.get_all()}

    session = compose(catalog_items, states, now, 900)
    assert session[0].item.id == 1
    assert session[0].item_type == ItemType.REVIEW
    assert calculate_progress(catalog_items, states, now).due == 1

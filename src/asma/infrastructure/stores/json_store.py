"""
JSON File State Store: Infrastructure adapter for local persistence.

Keeps one JSON document per user:

    {"version": 1, "states": {"<item_id>": {...}}, "sessions": [{...}]}

Documents are replaced atomically (write to a temp file, then os.replace),
so an interrupted write leaves the previous document intact.
"""

import asyncio
import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Any

from asma.domain.models import MemoryState, SessionResult
from asma.domain.ports import StateStore

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1
DEFAULT_USER = "local"
_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9_.-]")


class JsonFileStateStore(StateStore):
    """
    Stores MemoryStates for a single user in ``<state_dir>/<user>.json``.

    Read failures (missing, unreadable or corrupt file) degrade to an empty
    document with a logged warning. File I/O runs in a worker thread so the
    store can be used from the HTTP server without blocking the event loop.
    """

    def __init__(self, state_dir: Path, user_id: str | None = None):
        self.state_dir = Path(state_dir)
        self.user_id = user_id
        name = _UNSAFE_CHARS_RE.sub("_", user_id or DEFAULT_USER)
        self.path = self.state_dir / f"{name}.json"
        # Serializes read-modify-write cycles within one event loop
        self._lock = asyncio.Lock()

    async def get_all(self) -> list[MemoryState]:
        states = await asyncio.to_thread(self._load_states)
        return list(states.values())

    async def get_one(self, item_id: int) -> MemoryState | None:
        states = await asyncio.to_thread(self._load_states)
        return states.get(item_id)

    async def put_one(self, state: MemoryState) -> None:
        async with self._lock:
            await asyncio.to_thread(self._put_state, state)

    async def clear(self) -> None:
        async with self._lock:
            await asyncio.to_thread(self._write, _empty_document())

    async def add_session_result(self, result: SessionResult) -> None:
        async with self._lock:
            await asyncio.to_thread(self._append_session, result)

    async def list_session_results(self) -> list[SessionResult]:
        return await asyncio.to_thread(self._load_session_results)

    def _put_state(self, state: MemoryState) -> None:
        doc = self._read()
        doc["states"][str(state.item_id)] = state.to_dict()
        self._write(doc)

    def _append_session(self, result: SessionResult) -> None:
        doc = self._read()
        doc["sessions"].append(result.to_dict())
        self._write(doc)

    def _load_session_results(self) -> list[SessionResult]:
        results: list[SessionResult] = []
        for raw in self._read()["sessions"]:
            try:
                results.append(SessionResult.from_dict(raw))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed session record in {self.path}: {e}")
        return results

    def _load_states(self) -> dict[int, MemoryState]:
        states: dict[int, MemoryState] = {}
        for key, raw in self._read()["states"].items():
            try:
                state = MemoryState.from_dict(raw)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed state {key!r} in {self.path}: {e}")
                continue
            states[state.item_id] = state
        return states

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return _empty_document()
        try:
            doc = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read state file {self.path}: {e}")
            return _empty_document()

        if not isinstance(doc, dict):
            logger.warning(f"Ignoring state file with unexpected layout: {self.path}")
            return _empty_document()
        if not isinstance(doc.get("states"), dict):
            doc["states"] = {}
        if not isinstance(doc.get("sessions"), list):
            doc["sessions"] = []
        return doc

    def _write(self, doc: dict[str, Any]) -> None:
        doc["version"] = FORMAT_VERSION
        self.state_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.state_dir, prefix=".", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(doc, f, indent=2, sort_keys=True)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


def _empty_document() -> dict[str, Any]:
    return {"version": FORMAT_VERSION, "states": {}, "sessions": []}

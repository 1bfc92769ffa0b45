"""
Bundled Catalog: reads the names dataset shipped inside the package.
"""

import logging
from importlib.resources import files
from typing import Any

import yaml

from asma.domain.models import Item
from asma.domain.ports import CatalogProvider

logger = logging.getLogger(__name__)

DATA_PACKAGE = "asma.infrastructure.data"
DATA_FILE = "names.yaml"


def parse_items(raw: Any) -> list[Item]:
    """Build Items from the parsed YAML document (a list of mappings)."""
    if not isinstance(raw, list):
        raise ValueError("Catalog must be a list of names")

    items: list[Item] = []
    for entry in raw:
        if not isinstance(entry, dict):
            raise ValueError(f"Invalid catalog entry: {entry!r}")
        aliases = entry.get("aliases") or []
        items.append(
            Item(
                id=int(entry["id"]),
                name=str(entry["name"]),
                arabic=str(entry.get("arabic", "")),
                meaning=str(entry.get("meaning", "")),
                aliases=tuple(str(a) for a in aliases),
            )
        )
    return sorted(items, key=lambda i: i.id)


class BundledCatalog(CatalogProvider):
    """Loads the YAML dataset once and serves it from memory."""

    def __init__(self, text: str | None = None):
        """
        Args:
            text: Optional YAML document to use instead of the packaged file.
        """
        self._text = text
        self._items: list[Item] | None = None

    def load(self) -> list[Item]:
        if self._items is None:
            text = self._text
            if text is None:
                text = files(DATA_PACKAGE).joinpath(DATA_FILE).read_text(encoding="utf-8")
            self._items = parse_items(yaml.safe_load(text))
            logger.debug(f"Bundled catalog: {len(self._items)} items")
        return list(self._items)

    async def get_items(self) -> list[Item]:
        return self.load()

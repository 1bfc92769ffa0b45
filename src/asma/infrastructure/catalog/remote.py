"""
Remote Catalog: Infrastructure adapter for the Aladhan names API.

Arabic text and meanings come from the API; aliases always come from the
bundled dataset, matched by id. Any failure falls back to bundled data.
"""

import logging
from dataclasses import replace

import httpx

from asma.domain.constants import CATALOG_URL, REQUEST_TIMEOUT
from asma.domain.models import Item
from asma.domain.ports import CatalogProvider

from .bundled import BundledCatalog

logger = logging.getLogger(__name__)


class CatalogFetchError(Exception):
    pass


class RemoteCatalog(CatalogProvider):
    """Fetches names over HTTP, using the bundled catalog on failure."""

    def __init__(
        self,
        url: str = CATALOG_URL,
        fallback: BundledCatalog | None = None,
        timeout: float = REQUEST_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url
        self.timeout = timeout
        self._fallback = fallback or BundledCatalog()
        self._transport = transport
        self._items: list[Item] | None = None

    async def get_items(self) -> list[Item]:
        if self._items is not None:
            return list(self._items)

        bundled = await self._fallback.get_items()
        try:
            payload = await self._fetch()
            self._items = self._merge(payload, bundled)
            logger.info(f"Loaded {len(self._items)} names from {self.url}")
        except Exception as e:
            logger.warning(f"Failed to fetch names from {self.url}, using bundled data: {e}")
            self._items = bundled

        return list(self._items)

    async def _fetch(self) -> dict:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            resp = await client.get(self.url)
            resp.raise_for_status()
            return resp.json()

    def _merge(self, payload: dict, bundled: list[Item]) -> list[Item]:
        if not isinstance(payload, dict) or payload.get("code") != 200:
            raise CatalogFetchError("API returned invalid data")
        data = payload.get("data")
        if not isinstance(data, list):
            raise CatalogFetchError("API returned invalid data")
        if len(data) != len(bundled):
            raise CatalogFetchError(f"Expected {len(bundled)} names, got {len(data)}")

        by_id = {item.id: item for item in bundled}
        merged: list[Item] = []
        for entry in data:
            number = int(entry["number"])
            static = by_id.get(number)
            if static is None:
                raise CatalogFetchError(f"Unknown name number: {number}")
            merged.append(
                replace(
                    static,
                    arabic=entry.get("name") or static.arabic,
                    name=entry.get("transliteration") or static.name,
                    meaning=(entry.get("en") or {}).get("meaning") or static.meaning,
                )
            )
        return sorted(merged, key=lambda i: i.id)

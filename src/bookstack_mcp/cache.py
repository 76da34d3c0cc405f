"""
Process-lifetime lookup tables used when building navigable URLs.

Entries are filled lazily on first miss and never evicted: the number of
distinct parents touched in one session is small and slugs rarely change.
Concurrent misses for the same id share one in-flight fetch, so enriching a
list whose items share a parent costs one request for that parent.
A failed lookup falls back to the stringified id and is not cached, so URL
building never fails just because a parent record could not be fetched.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Generic, Tuple, TypeVar

from .errors import BookStackClientError

if TYPE_CHECKING:
    from .client import BookStackClient

log = logging.getLogger("bookstack_mcp.cache")

V = TypeVar("V")


@dataclass(frozen=True)
class PageInfo:
    slug: str
    book_id: int


class _SingleFlightCache(Generic[V]):
    """
    id -> value, where a miss runs `_fetch` once per id at a time.
    `_fetch` returns (value, cacheable); fallbacks come back uncached.
    """

    def __init__(self, client: "BookStackClient"):
        self._client = client
        self._values: Dict[int, V] = {}
        self._inflight: Dict[int, asyncio.Task] = {}

    def __contains__(self, key: int) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    async def _fetch(self, key: int) -> Tuple[V, bool]:
        raise NotImplementedError

    async def _load(self, key: int) -> V:
        try:
            value, cacheable = await self._fetch(key)
            if cacheable:
                self._values[key] = value
            return value
        finally:
            self._inflight.pop(key, None)

    async def resolve(self, key: int) -> V:
        cached = self._values.get(key)
        if cached is not None:
            return cached

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._load(key))
            self._inflight[key] = task
        # one waiter being cancelled must not cancel the shared fetch
        return await asyncio.shield(task)


class BookSlugCache(_SingleFlightCache[str]):
    """book id -> book slug."""

    async def _fetch(self, book_id: int) -> Tuple[str, bool]:
        try:
            data = await self._client.get(f"/books/{book_id}", tool="book_slug_cache")
        except BookStackClientError as exc:
            log.debug("Book slug lookup failed for %s: %s", book_id, exc)
            return str(book_id), False

        slug = data.get("slug") if isinstance(data, dict) else None
        return slug or str(book_id), True


class PageInfoCache(_SingleFlightCache[PageInfo]):
    """page id -> (page slug, owning book id); attachments point at pages by id."""

    async def _fetch(self, page_id: int) -> Tuple[PageInfo, bool]:
        try:
            data = await self._client.get(f"/pages/{page_id}", tool="page_info_cache")
        except BookStackClientError as exc:
            log.debug("Page info lookup failed for %s: %s", page_id, exc)
            return PageInfo(slug=str(page_id), book_id=0), False

        if not isinstance(data, dict):
            return PageInfo(slug=str(page_id), book_id=0), False

        book_id = data.get("book_id")
        info = PageInfo(
            slug=data.get("slug") or str(page_id),
            book_id=book_id if isinstance(book_id, int) else 0,
        )
        return info, True


__all__ = ["BookSlugCache", "PageInfo", "PageInfoCache"]

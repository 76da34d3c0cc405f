"""
Turns raw BookStack records into caller-facing dicts.

Every enriched record keeps its original fields and gains navigable URLs,
markdown links, friendly timestamps, previews and derived counts. Parent slugs
missing from a record are looked up through the client's slug caches; a failed
lookup degrades to id-based URLs instead of failing the record.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional
from urllib.parse import quote

from .cache import BookSlugCache, PageInfoCache
from .models import (
    Attachment,
    Book,
    Chapter,
    Comment,
    Derived,
    Enriched,
    Page,
    SearchResult,
    Shelf,
    Tag,
)
from .utils.time_format import describe_relative_time

DESCRIPTION_PREVIEW_CHARS = 100
SEARCH_PREVIEW_CHARS = 150
PAGE_PREVIEW_CHARS = 200
ELLIPSIS = "..."

NO_DESCRIPTION = "No description available"
NO_PREVIEW = "No preview available"
NO_CONTENT_PREVIEW = "No content preview available"


def truncate(text: Optional[str], limit: int, placeholder: str) -> str:
    """First `limit` chars plus an ellipsis when cut; placeholder when empty."""
    if not text:
        return placeholder
    if len(text) <= limit:
        return text
    return text[:limit] + ELLIPSIS


def word_count(text: Optional[str]) -> int:
    return len(text.split()) if text else 0


def markdown_link(name: str, url: str) -> str:
    return f"[{name}]({url})"


def plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'' if count == 1 else 's'}"


def tags_summary(tags: Iterable[Tag]) -> str:
    parts = [f"{t.name}={t.value}" if t.value else t.name for t in tags]
    return f"Tagged with: {', '.join(parts)}" if parts else "No tags"


async def gather_in_order(
    items: Iterable[Any], fn: Callable[[Any], Awaitable[Dict[str, Any]]]
) -> List[Dict[str, Any]]:
    # asyncio.gather returns results in argument order regardless of completion
    return list(await asyncio.gather(*(fn(item) for item in items)))


class Enricher:
    def __init__(
        self,
        base_url: str,
        book_slugs: BookSlugCache,
        page_info: PageInfoCache,
        *,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.book_slugs = book_slugs
        self.page_info = page_info
        self._now = now

    @classmethod
    def for_client(cls, client, **kwargs) -> "Enricher":
        return cls(client.base_url, client.book_slugs, client.page_info, **kwargs)

    # --- Time ---

    def friendly(self, timestamp: Optional[str]) -> str:
        now = self._now() if self._now else None
        return describe_relative_time(timestamp, now=now)

    # --- URLs ---

    def book_url(self, book: Book) -> str:
        return f"{self.base_url}/books/{book.slug or book.id}"

    def shelf_url(self, shelf: Shelf) -> str:
        return f"{self.base_url}/shelves/{shelf.slug or shelf.id}"

    def link_url(self, entity_id: int) -> str:
        return f"{self.base_url}/link/{entity_id}"

    def attachment_url(self, attachment_id: int) -> str:
        return f"{self.base_url}/attachments/{attachment_id}"

    def search_url(self, query: str) -> str:
        return f"{self.base_url}/search?term={quote(query, safe='')}"

    async def _book_slug(self, book_id: int, known: Optional[str] = None) -> str:
        if known:
            return known
        return await self.book_slugs.resolve(book_id)

    async def page_url(self, page: Page) -> str:
        book_slug = await self._book_slug(page.book_id, page.book_slug)
        return f"{self.base_url}/books/{book_slug}/page/{page.slug or page.id}"

    async def chapter_url(self, chapter: Chapter) -> str:
        book_slug = await self._book_slug(chapter.book_id, chapter.book_slug)
        return f"{self.base_url}/books/{book_slug}/chapter/{chapter.slug or chapter.id}"

    async def page_url_from_id(self, page_id: int) -> str:
        """URL for a page known only by id (attachments, comments)."""
        info = await self.page_info.resolve(page_id)
        if not info.book_id:
            return self.link_url(page_id)
        book_slug = await self.book_slugs.resolve(info.book_id)
        return f"{self.base_url}/books/{book_slug}/page/{info.slug}"

    async def content_url(self, result: SearchResult) -> str:
        kind = result.type
        if kind in ("page", "chapter"):
            if not result.book_id:
                return self.link_url(result.id)
            book_slug = await self.book_slugs.resolve(result.book_id)
            return f"{self.base_url}/books/{book_slug}/{kind}/{result.slug or result.id}"
        if kind == "book":
            return f"{self.base_url}/books/{result.slug or result.id}"
        if kind in ("bookshelf", "shelf"):
            return f"{self.base_url}/shelves/{result.slug or result.id}"
        return self.link_url(result.id)

    # --- Entities ---

    def book(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        book = Book.model_validate(raw)
        url = self.book_url(book)
        created = self.friendly(book.created_at)
        updated = self.friendly(book.updated_at)

        derived = Derived(
            url=url,
            direct_link=markdown_link(book.name, url),
            last_updated_friendly=updated,
            created_friendly=created,
            summary=truncate(book.description, DESCRIPTION_PREVIEW_CHARS, NO_DESCRIPTION),
            content_info=f"Book created {created}, last updated {updated}",
        )
        if book.contents is not None:
            chapters = [c for c in book.contents if c.get("type") == "chapter"]
            loose_pages = [c for c in book.contents if c.get("type") == "page"]
            nested = sum(len(c.get("pages") or []) for c in chapters)
            derived.chapter_count = len(chapters)
            derived.page_count = len(loose_pages) + nested
        return Enriched(record=book, derived=derived).to_dict()

    async def page(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        page = Page.model_validate(raw)
        url = await self.page_url(page)
        created = self.friendly(page.created_at)
        updated = self.friendly(page.updated_at)

        location = f"Book ID {page.book_id}"
        if page.chapter_id:
            location += f", Chapter ID {page.chapter_id}"

        derived = Derived(
            url=url,
            direct_link=markdown_link(page.name, url),
            last_updated_friendly=updated,
            created_friendly=created,
            content_preview=truncate(page.text, PAGE_PREVIEW_CHARS, NO_CONTENT_PREVIEW),
            content_info=f"Page created {created}, last updated {updated}",
            word_count=word_count(page.text),
            location=location,
        )
        return Enriched(record=page, derived=derived).to_dict()

    async def chapter(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        chapter = Chapter.model_validate(raw)
        url = await self.chapter_url(chapter)
        created = self.friendly(chapter.created_at)
        updated = self.friendly(chapter.updated_at)

        derived = Derived(
            url=url,
            direct_link=markdown_link(chapter.name, url),
            last_updated_friendly=updated,
            created_friendly=created,
            summary=truncate(
                chapter.description, DESCRIPTION_PREVIEW_CHARS, NO_DESCRIPTION
            ),
            content_info=f"Chapter created {created}, last updated {updated}",
            location=f"In Book ID {chapter.book_id}",
        )
        if isinstance(raw.get("pages"), list):
            derived.page_count = len(raw["pages"])
        return Enriched(record=chapter, derived=derived).to_dict()

    def shelf(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        shelf = Shelf.model_validate(raw)
        url = self.shelf_url(shelf)
        created = self.friendly(shelf.created_at)
        updated = self.friendly(shelf.updated_at)
        book_count = len(shelf.books)

        derived = Derived(
            url=url,
            direct_link=markdown_link(shelf.name, url),
            last_updated_friendly=updated,
            created_friendly=created,
            summary=truncate(shelf.description, DESCRIPTION_PREVIEW_CHARS, NO_DESCRIPTION),
            content_info=(
                f"Shelf with {plural(book_count, 'book')}, "
                f"created {created}, last updated {updated}"
            ),
            book_count=book_count,
            books=[self.book(b.model_dump(mode="json")) for b in shelf.books],
            tags_summary=tags_summary(shelf.tags),
        )
        return Enriched(record=shelf, derived=derived).to_dict()

    async def attachment(
        self, raw: Dict[str, Any], *, with_download: bool = False
    ) -> Dict[str, Any]:
        attachment = Attachment.model_validate(raw)
        download = self.attachment_url(attachment.id)

        derived = Derived(
            page_url=await self.page_url_from_id(attachment.uploaded_to),
            direct_link=markdown_link(attachment.name, download),
            created_friendly=self.friendly(attachment.created_at),
            last_updated_friendly=self.friendly(attachment.updated_at),
        )
        if with_download:
            derived.download_url = download
        return Enriched(record=attachment, derived=derived).to_dict()

    def comment(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        comment = Comment.model_validate(raw)
        derived = Derived(
            created_friendly=self.friendly(comment.created_at),
            last_updated_friendly=self.friendly(comment.updated_at),
        )
        return Enriched(record=comment, derived=derived).to_dict()

    async def search_result(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        result = SearchResult.model_validate(raw)
        url = await self.content_url(result)

        if result.book_id:
            location = f"In book ID {result.book_id}"
            if result.chapter_id:
                location += f", chapter ID {result.chapter_id}"
        else:
            location = "Location unknown"

        derived = Derived(
            url=url,
            direct_link=markdown_link(result.name, url),
            content_preview=truncate(result.snippet, SEARCH_PREVIEW_CHARS, NO_PREVIEW),
            content_type=result.type.capitalize(),
            location_info=location,
        )
        return Enriched(record=result, derived=derived).to_dict()

    # --- Collections ---

    async def pages(self, items: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return await gather_in_order(items, self.page)

    async def chapters(self, items: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return await gather_in_order(items, self.chapter)

    async def attachments(
        self, items: Iterable[Dict[str, Any]]
    ) -> List[Dict[str, Any]]:
        return await gather_in_order(items, self.attachment)

    async def search_results(
        self, items: Iterable[Dict[str, Any]], query: str
    ) -> Dict[str, Any]:
        results = await gather_in_order(items, self.search_result)
        return {
            "search_query": query,
            "search_url": self.search_url(query),
            "summary": f'Found {len(results)} results for "{query}"',
            "results": results,
        }


__all__ = [
    "DESCRIPTION_PREVIEW_CHARS",
    "ELLIPSIS",
    "Enricher",
    "PAGE_PREVIEW_CHARS",
    "SEARCH_PREVIEW_CHARS",
    "gather_in_order",
    "markdown_link",
    "tags_summary",
    "truncate",
    "word_count",
]

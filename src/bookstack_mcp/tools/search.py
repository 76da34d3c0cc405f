from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Literal, Optional

from bookstack_mcp.client import BookStackClient, BookStackClientError
from bookstack_mcp.enrichment import (
    NO_DESCRIPTION,
    NO_PREVIEW,
    PAGE_PREVIEW_CHARS,
    Enricher,
    gather_in_order,
    truncate,
)
from bookstack_mcp.models import SearchResult
from bookstack_mcp.tools._listing import clamp_count, data_elements

MAX_RECENT_LIMIT = 100

ContentType = Literal["book", "page", "chapter", "bookshelf"]
ChangeType = Literal["all", "page", "book", "chapter"]


async def search_content(
    client: BookStackClient,
    query: str,
    *,
    type: Optional[ContentType] = None,
    count: Optional[int] = None,
    offset: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Search across all BookStack content with previews and location info.
    Supports BookStack advanced syntax such as {type:page} or {book_id:5}.
    """
    search_query = f"{{type:{type}}} {query}".strip() if type else query
    params: Dict[str, Any] = {"query": search_query}
    if count:
        params["count"] = clamp_count(count)
    if offset:
        params["offset"] = offset

    payload = await client.get("/search", params=params, tool="search")
    enricher = Enricher.for_client(client)
    return await enricher.search_results(data_elements(payload), query)


async def search_pages(
    client: BookStackClient,
    query: str,
    *,
    book_id: Optional[int] = None,
    count: Optional[int] = None,
    offset: Optional[int] = None,
) -> Dict[str, Any]:
    """Search pages only, optionally within a single book."""
    search_query = f"{{type:page}} {query}".strip()
    if book_id:
        search_query = f"{{book_id:{book_id}}} {search_query}"
    params: Dict[str, Any] = {"query": search_query}
    if count:
        params["count"] = clamp_count(count)
    if offset:
        params["offset"] = offset

    payload = await client.get("/search", params=params, tool="search")
    enricher = Enricher.for_client(client)
    return await enricher.search_results(data_elements(payload), query)


async def _change_context(
    client: BookStackClient, result: SearchResult
) -> Dict[str, str]:
    """Fetch the full record behind a search hit for a preview and placement text."""
    preview = result.snippet
    if result.type == "page":
        page = await client.get(f"/pages/{result.id}", tool="recent_changes")
        book = (page.get("book") or {}).get("name") or "Unknown Book"
        context = f"Updated in book: {book}"
        chapter = page.get("chapter")
        if isinstance(chapter, dict) and chapter.get("name"):
            context += f", chapter: {chapter['name']}"
        return {"preview": page.get("text") or preview, "context": context}
    if result.type == "book":
        book = await client.get(f"/books/{result.id}", tool="recent_changes")
        pages = book.get("page_count")
        if pages is None and isinstance(book.get("contents"), list):
            pages = len(book["contents"])
        return {
            "preview": book.get("description") or NO_DESCRIPTION,
            "context": f"Book with {pages or 0} pages",
        }
    if result.type == "chapter":
        chapter = await client.get(f"/chapters/{result.id}", tool="recent_changes")
        book = (chapter.get("book") or {}).get("name") or "Unknown Book"
        return {
            "preview": chapter.get("description") or NO_DESCRIPTION,
            "context": f"Chapter in book: {book}",
        }
    return {"preview": preview, "context": f"{result.type.capitalize()} content"}


async def get_recent_changes(
    client: BookStackClient,
    *,
    type: ChangeType = "all",
    limit: int = 20,
    days: int = 30,
) -> Dict[str, Any]:
    """
    Recently updated content with previews and change descriptions.
    limit is capped at 100; days looks back from today (UTC).
    """
    limit = max(1, min(limit, MAX_RECENT_LIMIT))
    threshold = (datetime.now(timezone.utc) - timedelta(days=days)).date().isoformat()

    search_query = f"{{updated_at:>={threshold}}}"
    if type != "all":
        search_query = f"{{type:{type}}} {search_query}"

    payload = await client.get(
        "/search",
        params={"query": search_query, "count": limit, "sort": "updated_at"},
        tool="recent_changes",
    )
    raw_results = data_elements(payload)
    enricher = Enricher.for_client(client)

    async def describe(raw: Dict[str, Any]) -> Dict[str, Any]:
        result = SearchResult.model_validate(raw)
        try:
            ctx = await _change_context(client, result)
        except (BookStackClientError, AttributeError):
            ctx = {
                "preview": result.snippet,
                "context": f"{result.type.capitalize()} content",
            }
        url = await enricher.content_url(result)
        return {
            **result.model_dump(mode="json"),
            "url": url,
            "direct_link": f"[{result.name}]({url})",
            "content_preview": truncate(ctx["preview"], PAGE_PREVIEW_CHARS, NO_PREVIEW),
            "contextual_info": ctx["context"],
            "last_updated": enricher.friendly(result.updated_at or result.created_at),
            "change_summary": f'{result.type.capitalize()} "{result.name}" was updated',
        }

    results = await gather_in_order(raw_results, describe)
    scope = f" ({type}s only)" if type != "all" else ""
    return {
        "search_query": f"Recent changes in the last {days} days ({type})",
        "date_threshold": threshold,
        "search_url": enricher.search_url(search_query),
        "total_found": len(results),
        "summary": f"Found {len(results)} items updated in the last {days} days{scope}",
        "results": results,
    }

from __future__ import annotations

from typing import Any, Dict, Optional

from bookstack_mcp.client import BookStackClient
from bookstack_mcp.enrichment import Enricher
from bookstack_mcp.models import PageInput, PageUpdateInput
from bookstack_mcp.tools._listing import (
    DEFAULT_COUNT,
    data_elements,
    list_params,
    list_result,
)


def _require_content_target(data: PageInput) -> None:
    if not data.book_id and not data.chapter_id:
        raise ValueError("Either book_id or chapter_id is required to create a page.")
    if data.html is None and data.markdown is None:
        raise ValueError("Provide page content as html or markdown.")


async def get_pages(
    client: BookStackClient,
    *,
    book_id: Optional[int] = None,
    chapter_id: Optional[int] = None,
    offset: int = 0,
    count: int = DEFAULT_COUNT,
    sort: Optional[str] = None,
    filters: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    List pages with content previews, word counts and location info.
    book_id / chapter_id narrow the listing; filters adds any other API filter.
    """
    merged: Dict[str, Any] = dict(filters or {})
    if book_id:
        merged["book_id"] = book_id
    if chapter_id:
        merged["chapter_id"] = chapter_id

    params = list_params(offset=offset, count=count, sort=sort, filters=merged)
    payload = await client.get("/pages", params=params, tool="pages")

    items = await Enricher.for_client(client).pages(data_elements(payload))
    return list_result(payload, items, offset=offset, count=count)


async def get_page(client: BookStackClient, page_id: int) -> Dict[str, Any]:
    """Get the full content of a page with its URL, preview and word count."""
    payload = await client.get(f"/pages/{page_id}", tool="pages")
    return await Enricher.for_client(client).page(payload)


async def create_page(client: BookStackClient, data: PageInput) -> Dict[str, Any]:
    """Create a page in a book (or inside a chapter) from HTML or Markdown."""
    client.ensure_write_enabled()
    _require_content_target(data)
    created = await client.post("/pages", json=data.body(), tool="pages")
    return await Enricher.for_client(client).page(created)


async def update_page(
    client: BookStackClient, page_id: int, data: PageUpdateInput
) -> Dict[str, Any]:
    """Update a page's name or content; book_id/chapter_id move it."""
    client.ensure_write_enabled()
    updated = await client.put(f"/pages/{page_id}", json=data.body(), tool="pages")
    return await Enricher.for_client(client).page(updated)


async def delete_page(client: BookStackClient, page_id: int) -> Dict[str, Any]:
    """Delete a page (moves it to the recycle bin)."""
    client.ensure_write_enabled()
    await client.delete(f"/pages/{page_id}", tool="pages")
    return {"id": page_id, "deleted": True}

from __future__ import annotations

from typing import Any, Dict, Optional

from bookstack_mcp.client import BookStackClient
from bookstack_mcp.enrichment import Enricher
from bookstack_mcp.models import ChapterInput, ChapterUpdateInput
from bookstack_mcp.tools._listing import (
    DEFAULT_COUNT,
    data_elements,
    list_params,
    list_result,
)


async def get_chapters(
    client: BookStackClient,
    *,
    book_id: Optional[int] = None,
    offset: int = 0,
    count: int = DEFAULT_COUNT,
    sort: Optional[str] = None,
) -> Dict[str, Any]:
    """List chapters, optionally only those in one book."""
    params = list_params(
        offset=offset,
        count=count,
        sort=sort,
        filters={"book_id": book_id} if book_id else None,
    )
    payload = await client.get("/chapters", params=params, tool="chapters")

    items = await Enricher.for_client(client).chapters(data_elements(payload))
    return list_result(payload, items, offset=offset, count=count)


async def get_chapter(client: BookStackClient, chapter_id: int) -> Dict[str, Any]:
    """Get a chapter by ID, including its URL and the pages it contains."""
    payload = await client.get(f"/chapters/{chapter_id}", tool="chapters")
    return await Enricher.for_client(client).chapter(payload)


async def create_chapter(
    client: BookStackClient, data: ChapterInput
) -> Dict[str, Any]:
    """Create a chapter inside a book."""
    client.ensure_write_enabled()
    created = await client.post("/chapters", json=data.body(), tool="chapters")
    return await Enricher.for_client(client).chapter(created)


async def update_chapter(
    client: BookStackClient, chapter_id: int, data: ChapterUpdateInput
) -> Dict[str, Any]:
    """Update a chapter; set book_id to move it to another book."""
    client.ensure_write_enabled()
    updated = await client.put(
        f"/chapters/{chapter_id}", json=data.body(), tool="chapters"
    )
    return await Enricher.for_client(client).chapter(updated)


async def delete_chapter(client: BookStackClient, chapter_id: int) -> Dict[str, Any]:
    """Delete a chapter and the pages inside it."""
    client.ensure_write_enabled()
    await client.delete(f"/chapters/{chapter_id}", tool="chapters")
    return {"id": chapter_id, "deleted": True}

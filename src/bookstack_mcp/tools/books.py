from __future__ import annotations

from typing import Any, Dict, Optional

from bookstack_mcp.client import BookStackClient
from bookstack_mcp.enrichment import Enricher
from bookstack_mcp.models import BookInput, BookUpdateInput
from bookstack_mcp.tools._listing import (
    DEFAULT_COUNT,
    data_elements,
    list_params,
    list_result,
)


async def get_books(
    client: BookStackClient,
    *,
    offset: int = 0,
    count: int = DEFAULT_COUNT,
    sort: Optional[str] = None,
    filters: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    List books with offset/count pagination, sorting (e.g. "name", "-created_at")
    and filters (e.g. {"name": "Guide"}).
    """
    params = list_params(offset=offset, count=count, sort=sort, filters=filters)
    payload = await client.get("/books", params=params, tool="books")

    enricher = Enricher.for_client(client)
    items = [enricher.book(b) for b in data_elements(payload)]
    return list_result(payload, items, offset=offset, count=count)


async def get_book(client: BookStackClient, book_id: int) -> Dict[str, Any]:
    """Get a book by ID with its URL, summary, friendly dates and content counts."""
    payload = await client.get(f"/books/{book_id}", tool="books")
    return Enricher.for_client(client).book(payload)


async def create_book(client: BookStackClient, data: BookInput) -> Dict[str, Any]:
    """Create a new book."""
    client.ensure_write_enabled()
    created = await client.post("/books", json=data.body(), tool="books")
    return Enricher.for_client(client).book(created)


async def update_book(
    client: BookStackClient, book_id: int, data: BookUpdateInput
) -> Dict[str, Any]:
    """Update a book's name, description or tags. Only provided fields change."""
    client.ensure_write_enabled()
    updated = await client.put(f"/books/{book_id}", json=data.body(), tool="books")
    return Enricher.for_client(client).book(updated)


async def delete_book(client: BookStackClient, book_id: int) -> Dict[str, Any]:
    """Delete a book (moves it to the recycle bin)."""
    client.ensure_write_enabled()
    await client.delete(f"/books/{book_id}", tool="books")
    return {"id": book_id, "deleted": True}

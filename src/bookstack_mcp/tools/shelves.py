from __future__ import annotations

from typing import Any, Dict, Optional

from bookstack_mcp.client import BookStackClient
from bookstack_mcp.enrichment import Enricher
from bookstack_mcp.models import ShelfInput, ShelfUpdateInput
from bookstack_mcp.tools._listing import (
    DEFAULT_COUNT,
    data_elements,
    list_params,
    list_result,
)


async def get_shelves(
    client: BookStackClient,
    *,
    offset: int = 0,
    count: int = DEFAULT_COUNT,
    sort: Optional[str] = None,
    filters: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """List shelves (collections of books) with filtering and sorting."""
    params = list_params(offset=offset, count=count, sort=sort, filters=filters)
    payload = await client.get("/shelves", params=params, tool="shelves")

    enricher = Enricher.for_client(client)
    items = [enricher.shelf(s) for s in data_elements(payload)]
    return list_result(payload, items, offset=offset, count=count)


async def get_shelf(client: BookStackClient, shelf_id: int) -> Dict[str, Any]:
    """Get a shelf with all of its books and tags."""
    payload = await client.get(f"/shelves/{shelf_id}", tool="shelves")
    return Enricher.for_client(client).shelf(payload)


async def create_shelf(client: BookStackClient, data: ShelfInput) -> Dict[str, Any]:
    """Create a shelf, optionally seeded with book IDs and tags."""
    client.ensure_write_enabled()
    created = await client.post("/shelves", json=data.body(), tool="shelves")
    return Enricher.for_client(client).shelf(created)


async def update_shelf(
    client: BookStackClient, shelf_id: int, data: ShelfUpdateInput
) -> Dict[str, Any]:
    """Update a shelf. A provided books list replaces the shelf's books."""
    client.ensure_write_enabled()
    updated = await client.put(
        f"/shelves/{shelf_id}", json=data.body(), tool="shelves"
    )
    return Enricher.for_client(client).shelf(updated)


async def delete_shelf(client: BookStackClient, shelf_id: int) -> Dict[str, Any]:
    """Delete a shelf. Books on it are kept."""
    client.ensure_write_enabled()
    await client.delete(f"/shelves/{shelf_id}", tool="shelves")
    return {"id": shelf_id, "deleted": True}

from __future__ import annotations

from typing import Any, Dict, Optional

from bookstack_mcp.client import BookStackClient
from bookstack_mcp.enrichment import Enricher
from bookstack_mcp.models import CommentInput, CommentUpdateInput
from bookstack_mcp.tools._listing import (
    DEFAULT_COUNT,
    data_elements,
    list_params,
    list_result,
)


async def get_comments(
    client: BookStackClient,
    *,
    page_id: Optional[int] = None,
    offset: int = 0,
    count: int = DEFAULT_COUNT,
    sort: Optional[str] = None,
) -> Dict[str, Any]:
    """List comments, optionally only those on one page."""
    filters = (
        {"commentable_id": page_id, "commentable_type": "page"} if page_id else None
    )
    params = list_params(offset=offset, count=count, sort=sort, filters=filters)
    payload = await client.get("/comments", params=params, tool="comments")

    enricher = Enricher.for_client(client)
    items = [enricher.comment(c) for c in data_elements(payload)]
    return list_result(payload, items, offset=offset, count=count)


async def get_comment(client: BookStackClient, comment_id: int) -> Dict[str, Any]:
    """Get a comment, including its replies."""
    payload = await client.get(f"/comments/{comment_id}", tool="comments")
    return Enricher.for_client(client).comment(payload)


async def create_comment(
    client: BookStackClient, data: CommentInput
) -> Dict[str, Any]:
    """Comment on a page; reply_to answers an existing comment by local id."""
    client.ensure_write_enabled()
    created = await client.post("/comments", json=data.body(), tool="comments")
    return Enricher.for_client(client).comment(created)


async def update_comment(
    client: BookStackClient, comment_id: int, data: CommentUpdateInput
) -> Dict[str, Any]:
    """Edit a comment's HTML or archive/unarchive it."""
    client.ensure_write_enabled()
    updated = await client.put(
        f"/comments/{comment_id}", json=data.body(), tool="comments"
    )
    return Enricher.for_client(client).comment(updated)


async def delete_comment(client: BookStackClient, comment_id: int) -> Dict[str, Any]:
    """Delete a comment."""
    client.ensure_write_enabled()
    await client.delete(f"/comments/{comment_id}", tool="comments")
    return {"id": comment_id, "deleted": True}

from __future__ import annotations

import base64
import binascii
import io
import mimetypes
from pathlib import Path
from typing import Any, Dict, Optional

from bookstack_mcp.client import BookStackClient, BookStackClientError
from bookstack_mcp.enrichment import Enricher
from bookstack_mcp.models import AttachmentLinkInput, AttachmentUpdateInput
from bookstack_mcp.tools._listing import (
    DEFAULT_COUNT,
    data_elements,
    list_params,
    list_result,
)


async def get_attachments(
    client: BookStackClient,
    *,
    offset: int = 0,
    count: int = DEFAULT_COUNT,
    sort: Optional[str] = None,
    filters: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    List attachments (files and links).
    Filter by page with filters={"uploaded_to": <page id>}.
    """
    params = list_params(offset=offset, count=count, sort=sort, filters=filters)
    payload = await client.get("/attachments", params=params, tool="attachments")

    items = await Enricher.for_client(client).attachments(data_elements(payload))
    return list_result(payload, items, offset=offset, count=count)


async def get_attachment(
    client: BookStackClient, attachment_id: int
) -> Dict[str, Any]:
    """Get an attachment with its page URL and download link."""
    payload = await client.get(f"/attachments/{attachment_id}", tool="attachments")
    return await Enricher.for_client(client).attachment(payload, with_download=True)


async def create_attachment(
    client: BookStackClient, data: AttachmentLinkInput
) -> Dict[str, Any]:
    """Attach an external http(s) link to a page."""
    client.ensure_write_enabled()
    created = await client.post("/attachments", json=data.body(), tool="attachments")
    return await Enricher.for_client(client).attachment(created)


async def upload_attachment(
    client: BookStackClient,
    uploaded_to: int,
    file_path: Optional[str] = None,
    *,
    name: Optional[str] = None,
    content_base64: Optional[str] = None,
    file_name: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Upload a file as an attachment on a page.
    Content comes from file_path (``~`` expanded) or from content_base64.
    Multipart parts: name, uploaded_to, file.
    """
    client.ensure_write_enabled()

    if file_path and content_base64:
        raise BookStackClientError("Provide either file_path or content_base64, not both.")

    if content_base64 is not None:
        try:
            content = base64.b64decode(content_base64, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise BookStackClientError(f"Invalid base64 content: {exc}") from exc
        fname = file_name or "attachment.bin"
    elif file_path:
        path = Path(file_path).expanduser()
        if not path.is_file():
            raise BookStackClientError(f"File not found: {path}")
        content = path.read_bytes()
        fname = file_name or path.name
    else:
        raise BookStackClientError(
            "Either file_path or content_base64 must be provided."
        )

    if not content:
        raise BookStackClientError("Attachment content is empty; refusing to upload.")

    ctype = mimetypes.guess_type(fname)[0] or "application/octet-stream"
    created = await client.post_form(
        "/attachments",
        data={"name": name or fname, "uploaded_to": str(uploaded_to)},
        files={"file": (fname, io.BytesIO(content), ctype)},
        tool="attachments",
    )
    return await Enricher.for_client(client).attachment(created)


async def update_attachment(
    client: BookStackClient, attachment_id: int, data: AttachmentUpdateInput
) -> Dict[str, Any]:
    """Rename an attachment, change its link, or move it to another page."""
    client.ensure_write_enabled()
    updated = await client.put(
        f"/attachments/{attachment_id}", json=data.body(), tool="attachments"
    )
    return await Enricher.for_client(client).attachment(updated)


async def delete_attachment(
    client: BookStackClient, attachment_id: int
) -> Dict[str, Any]:
    """Delete an attachment."""
    client.ensure_write_enabled()
    await client.delete(f"/attachments/{attachment_id}", tool="attachments")
    return {"id": attachment_id, "deleted": True}

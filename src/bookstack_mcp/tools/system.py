from __future__ import annotations

import time
from typing import Any, Dict, Optional

from bookstack_mcp import __version__
from bookstack_mcp.client import BookStackClient
from bookstack_mcp.tools._listing import (
    DEFAULT_COUNT,
    data_elements,
    list_params,
    list_result,
)

SERVER_NAME = "BookStack MCP Server"


async def get_capabilities(client: BookStackClient) -> Dict[str, Any]:
    """
    Describe this server and its current configuration.
    Local only; never calls BookStack.
    """
    enabled = client.enable_write
    return {
        "server_name": SERVER_NAME,
        "version": __version__,
        "instance_url": client.base_url,
        "write_operations_enabled": enabled,
        "available_tools": "All tools enabled" if enabled else "Read-only tools only",
        "security_note": (
            "Write operations are ENABLED - AI can create and modify BookStack content"
            if enabled
            else "Read-only mode - Safe for production use"
        ),
    }


async def get_system_info(client: BookStackClient) -> Dict[str, Any]:
    """
    BookStack version, instance id, app name and base URL, plus request latency.
    """
    start = time.perf_counter()
    info = await client.get("/system", tool="system")
    latency_ms = (time.perf_counter() - start) * 1000

    result = dict(info) if isinstance(info, dict) else {"raw": info}
    result["latency_ms"] = round(latency_ms, 2)
    return result


async def get_audit_log(
    client: BookStackClient,
    *,
    offset: int = 0,
    count: int = DEFAULT_COUNT,
    sort: Optional[str] = None,
    filters: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Audit log of user activity (requires the 'Manage settings' permission).
    filters example: {"type": "page_update", "user_id": 3}
    """
    params = list_params(offset=offset, count=count, sort=sort, filters=filters)
    payload = await client.get("/audit-log", params=params, tool="audit_log")
    return list_result(payload, data_elements(payload), offset=offset, count=count)


async def get_recycle_bin(
    client: BookStackClient,
    *,
    offset: int = 0,
    count: int = DEFAULT_COUNT,
    sort: Optional[str] = None,
) -> Dict[str, Any]:
    """Deleted items awaiting restore or permanent removal."""
    params = list_params(offset=offset, count=count, sort=sort)
    payload = await client.get("/recycle-bin", params=params, tool="recycle_bin")
    return list_result(payload, data_elements(payload), offset=offset, count=count)


async def get_images(
    client: BookStackClient,
    *,
    offset: int = 0,
    count: int = DEFAULT_COUNT,
    sort: Optional[str] = None,
    filters: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    List images in the gallery.
    filters example: {"uploaded_to": <page id>, "type": "gallery"}
    """
    params = list_params(offset=offset, count=count, sort=sort, filters=filters)
    payload = await client.get("/image-gallery", params=params, tool="images")
    return list_result(payload, data_elements(payload), offset=offset, count=count)


async def get_image(client: BookStackClient, image_id: int) -> Dict[str, Any]:
    """Get a gallery image with its thumbnails and HTML/markdown embed content."""
    return await client.get(f"/image-gallery/{image_id}", tool="images")

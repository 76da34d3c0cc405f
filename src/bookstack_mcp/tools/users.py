from __future__ import annotations

from typing import Any, Dict, Optional

from bookstack_mcp.client import BookStackClient, BookStackHTTPError
from bookstack_mcp.enrichment import Enricher
from bookstack_mcp.tools._listing import (
    DEFAULT_COUNT,
    data_elements,
    list_params,
    list_result,
)


def _user_profile(enricher: Enricher, payload: Dict[str, Any]) -> Dict[str, Any]:
    profile = dict(payload)
    profile["created_friendly"] = enricher.friendly(payload.get("created_at"))
    profile["last_updated_friendly"] = enricher.friendly(payload.get("updated_at"))
    if payload.get("slug"):
        profile["url"] = f"{enricher.base_url}/user/{payload['slug']}"
    return profile


async def get_users(
    client: BookStackClient,
    *,
    offset: int = 0,
    count: int = DEFAULT_COUNT,
    sort: Optional[str] = None,
    filters: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    List users (requires the 'Manage users' permission).
    filters example: {"email": "jane@example.com"}
    """
    params = list_params(offset=offset, count=count, sort=sort, filters=filters)
    payload = await client.get("/users", params=params, tool="users")

    enricher = Enricher.for_client(client)
    items = [_user_profile(enricher, u) for u in data_elements(payload)]
    return list_result(payload, items, offset=offset, count=count)


async def get_user(client: BookStackClient, user_id: int) -> Dict[str, Any]:
    """
    Fetch a user by ID, including their roles.

    Notes:
    - BookStack answers 403 when the token lacks the 'Manage users' permission.
    """
    try:
        payload = await client.get(f"/users/{user_id}", tool="users")
    except BookStackHTTPError as exc:
        if exc.status_code == 403:
            raise BookStackHTTPError(
                status_code=exc.status_code,
                method="GET",
                url=exc.url,
                message="Permission denied: unable to view this user.",
                body=exc.body,
            ) from exc
        raise

    return _user_profile(Enricher.for_client(client), payload)

"""
Shared helpers for BookStack list endpoints ({"data": [...], "total": N}).
"""

from typing import Any, Dict, List, Optional

DEFAULT_COUNT = 50
MAX_COUNT = 500


def clamp_count(count: int) -> int:
    """Clamp count into the range the API accepts."""
    return max(1, min(count, MAX_COUNT))


def list_params(
    *,
    offset: int = 0,
    count: int = DEFAULT_COUNT,
    sort: Optional[str] = None,
    filters: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Build offset/count/sort/filter[...] query params.
    Example: filters={"book_id": 3} -> {"filter[book_id]": "3"}
    """
    if offset < 0:
        raise ValueError("offset must be >= 0")

    params: Dict[str, Any] = {"offset": offset, "count": clamp_count(count)}
    if sort:
        params["sort"] = sort
    for key, value in (filters or {}).items():
        if value is None:
            continue
        params[f"filter[{key}]"] = str(value)
    return params


def data_elements(payload: Any) -> List[Dict[str, Any]]:
    """
    Extract the records of a list response.
    Accepts both {"data": [...]} and a bare list.
    """
    if payload is None:
        return []
    if isinstance(payload, list):
        elements = payload
    elif isinstance(payload, dict):
        elements = payload.get("data", [])
    else:
        raise ValueError("Expected a JSON object or list from a list endpoint.")
    if not isinstance(elements, list):
        raise ValueError("Expected data to be a list.")
    return [e for e in elements if isinstance(e, dict)]


def total_of(payload: Any, fallback: int) -> int:
    total = payload.get("total") if isinstance(payload, dict) else None
    return total if isinstance(total, int) else fallback


def list_result(
    payload: Any, items: List[Dict[str, Any]], *, offset: int, count: int
) -> Dict[str, Any]:
    total = total_of(payload, len(items))
    count = clamp_count(count)
    next_offset: Optional[int] = None
    if (offset + count) < total:
        next_offset = offset + count
    return {
        "data": items,
        "total": total,
        "offset": offset,
        "count": count,
        "next_offset": next_offset,
    }

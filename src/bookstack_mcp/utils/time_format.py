from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Optional

UNKNOWN_DATE = "Unknown date"


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse BookStack timestamps such as "2024-01-02T10:00:00.000000Z".
    Naive values are taken as UTC. Returns None when unparseable.
    """
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def describe_relative_time(
    value: Optional[str], *, now: Optional[datetime] = None
) -> str:
    """
    Human-friendly age of a timestamp.

    Buckets use whole elapsed hours:
    - under 1 hour  -> "less than an hour ago"
    - under 24 hours -> "N hours ago"
    - under 7 days  -> "N days ago"
    - under 4 weeks -> "N weeks ago"
    - otherwise the absolute date (YYYY-MM-DD)
    """
    if not value:
        return UNKNOWN_DATE
    moment = parse_timestamp(value)
    if moment is None:
        return str(value)

    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    hours = math.floor((now - moment).total_seconds() / 3600)
    if hours < 1:
        return "less than an hour ago"
    if hours < 24:
        return f"{hours} hours ago"
    days = hours // 24
    if days < 7:
        return f"{days} days ago"
    weeks = days // 7
    if weeks < 4:
        return f"{weeks} weeks ago"
    return moment.date().isoformat()


__all__ = ["UNKNOWN_DATE", "describe_relative_time", "parse_timestamp"]

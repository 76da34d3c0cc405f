from __future__ import annotations

import logging
from typing import Any, Optional

# Attributes every LogRecord already carries; extras must not shadow them.
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}

_default_log = logging.getLogger("bookstack_mcp.observability")


def log_event(
    event: str,
    logger: Optional[logging.Logger] = None,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    """
    Emit one structured event. Fields become LogRecord extras so the logfmt
    formatter can print them; None values and clashing names are dropped.
    """
    extra = {
        key: value
        for key, value in fields.items()
        if value is not None and key not in _RECORD_ATTRS
    }
    (logger or _default_log).log(level, event, extra=extra)


__all__ = ["log_event"]

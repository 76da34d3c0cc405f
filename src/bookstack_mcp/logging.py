import logging
import sys
from typing import Any, Optional

# Extras set by BookStackClient and the tool registry
LOG_EXTRA_FIELDS = ("tool", "method", "path", "status", "attempt", "duration_ms")
ERROR_FIELDS = ("error_type",)


def _logfmt_value(val: Any) -> str:
    if isinstance(val, (bool, int, float)):
        return str(val).lower() if isinstance(val, bool) else str(val)
    text = str(val)
    if not text or any(ch in text for ch in ' ="'):
        return '"' + text.replace('"', '\\"') + '"'
    return text


class LogfmtFormatter(logging.Formatter):
    """key=value lines: level, logger, event, then whichever extras are set."""

    fields = LOG_EXTRA_FIELDS + ERROR_FIELDS

    def format(self, record: logging.LogRecord) -> str:
        pairs = [("level", record.levelname.lower()), ("logger", record.name)]
        event = record.getMessage()
        if event:
            pairs.append(("event", event))
        pairs.extend(
            (key, getattr(record, key))
            for key in self.fields
            if getattr(record, key, None) is not None
        )
        if record.exc_info and record.exc_info[0] is not None:
            pairs.append(("exc_type", record.exc_info[0].__name__))
        return " ".join(f"{key}={_logfmt_value(val)}" for key, val in pairs)


def setup_logging(level: Optional[str] = None) -> None:
    """
    Route all logging to stderr in logfmt. stdout is reserved for the MCP
    stdio stream. Unknown level names fall back to INFO.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(LogfmtFormatter())
    logging.basicConfig(
        level=getattr(logging, (level or "INFO").upper(), logging.INFO),
        handlers=[handler],
        force=True,
    )


__all__ = ["setup_logging", "LogfmtFormatter", "LOG_EXTRA_FIELDS"]

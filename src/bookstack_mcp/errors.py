from __future__ import annotations

import logging
from typing import Dict, List, Optional

WRITE_DISABLED_MESSAGE = (
    "Write operations are disabled. Set BOOKSTACK_ENABLE_WRITE=true to enable."
)

log = logging.getLogger("bookstack_mcp.errors")


class BookStackClientError(Exception):
    """Base error for client failures (network, timeout, parse, local guards)."""


class BookStackHTTPError(BookStackClientError):
    """The remote API answered with a non-2xx status."""

    def __init__(
        self,
        *,
        status_code: int,
        method: str,
        url: str,
        message: str,
        body: str = "",
        validation: Optional[Dict[str, List[str]]] = None,
    ):
        super().__init__(f"{status_code} {method} {url}: {message}")
        self.status_code = status_code
        self.method = method
        self.url = url
        self.message = message
        self.body = body
        # field -> messages, from a 422 body
        self.validation = validation or {}

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == 429


class BookStackParseError(BookStackClientError):
    pass


class WriteDisabledError(BookStackClientError):
    def __init__(self, message: str = WRITE_DISABLED_MESSAGE):
        super().__init__(message)
        self.message = message


class EmptyExportError(BookStackClientError):
    pass


def _validation_detail(validation: Dict[str, List[str]]) -> str:
    return "; ".join(
        f"{field}: {' '.join(messages)}" for field, messages in validation.items()
    )


def describe_error(exc: BaseException) -> str:
    """
    Turn any tool failure into a short, user-facing sentence.
    Full detail goes to the log; the caller only sees the category.
    """
    if isinstance(exc, BookStackHTTPError):
        log.error(
            "BookStack API error: %s %s -> %s (%s)",
            exc.method,
            exc.url,
            exc.status_code,
            exc.message,
        )
        status = exc.status_code
        if status in (401, 403):
            return "Authentication or permission error accessing BookStack."
        if status == 404:
            return "The requested content was not found in BookStack."
        if status == 422:
            text = f"Validation error: {exc.message or 'invalid input.'}"
            if exc.validation:
                text += f" ({_validation_detail(exc.validation)})"
            return text
        if status == 429:
            return "Rate limit exceeded. Please try again later."
        if status >= 500:
            return "BookStack server error. Please try again later."
        return "BookStack request failed."

    if isinstance(exc, WriteDisabledError):
        return exc.message

    log.error("Tool error: %s: %s", type(exc).__name__, exc)
    if isinstance(exc, EmptyExportError):
        return str(exc)
    if isinstance(exc, ValueError):
        return f"Invalid input: {exc}"
    return "An unexpected error occurred."


__all__ = [
    "BookStackClientError",
    "BookStackHTTPError",
    "BookStackParseError",
    "EmptyExportError",
    "WRITE_DISABLED_MESSAGE",
    "WriteDisabledError",
    "describe_error",
]

import logging

import pytest
import respx
from httpx import Response

from bookstack_mcp.client import BookStackClient
from bookstack_mcp.logging import LogfmtFormatter
from bookstack_mcp.observability import log_event

BASE = "https://docs.example.com"


def _record(msg: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("bookstack_mcp.test", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_logfmt_quotes_values_with_spaces():
    line = LogfmtFormatter().format(
        _record("bookstack.request", tool="books", path="/books", status=200)
    )

    assert line.startswith("level=info logger=bookstack_mcp.test event=bookstack.request")
    assert "tool=books" in line
    assert "status=200" in line

    quoted = LogfmtFormatter().format(_record("tool failed", error_type="Value Error"))
    assert 'event="tool failed"' in quoted
    assert 'error_type="Value Error"' in quoted


def test_log_event_drops_reserved_keys(caplog):
    logger = logging.getLogger("bookstack_mcp.observability")
    with caplog.at_level(logging.INFO, logger="bookstack_mcp.observability"):
        log_event("tool.error", logger=logger, tool="get_page", name="clobber")

    record = next(r for r in caplog.records if r.getMessage() == "tool.error")
    assert record.tool == "get_page"
    assert record.name == "bookstack_mcp.observability"


@pytest.mark.asyncio
@respx.mock
async def test_client_logs_requests(caplog):
    respx.get(f"{BASE}/api/books").mock(return_value=Response(200, json={"data": []}))

    client = BookStackClient(base_url=BASE, token_id="tid", token_secret="tsecret")
    with caplog.at_level(logging.DEBUG, logger="bookstack_mcp.client"):
        async with client:
            await client.get("/books", tool="books")

    record = next(r for r in caplog.records if r.getMessage() == "bookstack.request")
    assert record.tool == "books"
    assert record.status == 200
    assert record.path == "/books"
    assert record.attempt == 0
    # credentials never reach the log
    assert "tsecret" not in caplog.text


def test_logfmt_renders_only_known_extras():
    line = LogfmtFormatter().format(
        _record("bookstack.request", method="GET", duration_ms=12.5, token_secret="x")
    )

    assert "method=GET" in line
    assert "duration_ms=12.5" in line
    assert "token_secret" not in line


def test_log_event_skips_none_values(caplog):
    with caplog.at_level(logging.INFO, logger="bookstack_mcp.observability"):
        log_event("tool.error", tool="get_book", status=None)

    record = next(r for r in caplog.records if r.getMessage() == "tool.error")
    assert record.tool == "get_book"
    assert not hasattr(record, "status")

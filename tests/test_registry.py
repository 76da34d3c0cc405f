import inspect
from types import ModuleType

import pytest
from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from bookstack_mcp.client import BookStackClient
from bookstack_mcp.registry import (
    discover_tool_modules,
    is_write_tool,
    register_discovered_tools,
)

BASE = "https://docs.example.com"


def _make_module(name: str, code: str) -> ModuleType:
    module = ModuleType(name)
    exec(code, module.__dict__)
    return module


def _client(enable_write: bool = False) -> BookStackClient:
    return BookStackClient(
        base_url=BASE, token_id="tid", token_secret="tsecret", enable_write=enable_write
    )


class RecordingApp:
    def __init__(self):
        self.registered = []

    def tool(self, name):
        def decorator(fn):
            self.registered.append((name, fn))
            return fn

        return decorator


@pytest.mark.asyncio
async def test_register_discovered_tools_registers_valid_tools_only():
    code = """
async def tool_fn(client, *, foo:int=1):
    return (client.base_url, foo)

async def _private(client):
    return None

async def wrong_first(arg1, client):
    return None

def sync_func(client):
    return None
"""
    mod = _make_module("fake_mod", code)
    app = RecordingApp()

    register_discovered_tools(app, _client(), modules=[mod])

    assert [n for n, _ in app.registered] == ["tool_fn"]

    # wrapper signature should not expose client
    sig = inspect.signature(app.registered[0][1])
    assert "client" not in sig.parameters

    result = await app.registered[0][1](foo=5)
    assert result == (BASE, 5)


def test_register_discovered_tools_duplicate_names_raise():
    mod1 = _make_module("mod1", "async def tool_fn(client): return None")
    mod2 = _make_module("mod2", "async def tool_fn(client): return None")

    with pytest.raises(ValueError):
        register_discovered_tools(RecordingApp(), _client(), modules=[mod1, mod2])


def test_write_tools_hidden_when_disabled():
    code = """
async def get_thing(client): return None
async def create_thing(client): return None
async def upload_thing(client): return None
"""
    mod = _make_module("things", code)

    read_only = RecordingApp()
    register_discovered_tools(read_only, _client(enable_write=False), modules=[mod])
    assert [n for n, _ in read_only.registered] == ["get_thing"]

    writable = RecordingApp()
    register_discovered_tools(writable, _client(enable_write=True), modules=[mod])
    assert sorted(n for n, _ in writable.registered) == [
        "create_thing",
        "get_thing",
        "upload_thing",
    ]


def test_is_write_tool():
    assert is_write_tool("delete_page")
    assert is_write_tool("upload_attachment")
    assert not is_write_tool("get_page")
    assert not is_write_tool("export_book")


@pytest.mark.asyncio
async def test_wrapper_converts_errors_to_sanitized_tool_error():
    code = """
from bookstack_mcp.errors import BookStackHTTPError

async def get_secret(client):
    raise BookStackHTTPError(
        status_code=401, method="GET", url="https://x/api/secret", message="token abc bad"
    )
"""
    mod = _make_module("secret_mod", code)
    app = RecordingApp()
    register_discovered_tools(app, _client(), modules=[mod])

    with pytest.raises(ToolError) as exc:
        await app.registered[0][1]()

    assert str(exc.value) == "Authentication or permission error accessing BookStack."
    assert "abc" not in str(exc.value)


def test_discover_real_tool_modules():
    modules = discover_tool_modules()
    names = {m.__name__ for m in modules}

    assert "bookstack_mcp.tools.books" in names
    assert "bookstack_mcp.tools.search" in names
    assert "bookstack_mcp.tools._listing" not in names


@pytest.mark.asyncio
async def test_fastmcp_lists_read_tools_only_when_writes_disabled():
    app = FastMCP("test")
    register_discovered_tools(app, _client(enable_write=False))

    tools = {t.name for t in await app.list_tools()}

    assert {"get_capabilities", "get_page", "search_content", "export_book"} <= tools
    assert "get_recent_changes" in tools
    assert not any(is_write_tool(name) for name in tools)


@pytest.mark.asyncio
async def test_fastmcp_lists_write_tools_when_enabled():
    app = FastMCP("test")
    names = register_discovered_tools(app, _client(enable_write=True))

    tools = {t.name for t in await app.list_tools()}

    assert set(names) == tools
    assert {"create_book", "update_page", "delete_shelf", "upload_attachment"} <= tools
    assert len(tools) == 45

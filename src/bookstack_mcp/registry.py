from __future__ import annotations

import importlib
import inspect
import logging
import pkgutil
from types import ModuleType
from typing import Callable, Iterable, List, Optional, Set, Union, get_type_hints

from mcp.server.fastmcp.exceptions import ToolError

from .client import BookStackClient
from .errors import describe_error
from .observability import log_event

log = logging.getLogger("bookstack_mcp.registry")

WRITE_TOOL_PREFIXES = ("create_", "update_", "delete_", "upload_")


def is_write_tool(name: str) -> bool:
    return name.startswith(WRITE_TOOL_PREFIXES)


# --- Discovery helpers ----------------------------------------------------- #


def discover_tool_modules(package_name: str = "bookstack_mcp.tools") -> List[ModuleType]:
    """Import all modules under the given tools package, skipping failures."""
    modules: List[ModuleType] = []
    base_pkg = importlib.import_module(package_name)

    for finder in pkgutil.iter_modules(base_pkg.__path__, base_pkg.__name__ + "."):
        name = finder.name
        if name.rsplit(".", 1)[-1].startswith("_"):
            continue
        try:
            module = importlib.import_module(name)
            modules.append(module)
        except Exception as exc:  # pragma: no cover - logged, not fatal
            log.error("Failed importing tool module %s: %s", name, exc)
            continue

    return modules


def iter_tool_functions(module: ModuleType) -> Iterable[Callable]:
    """Yield functions that satisfy the tool convention."""
    for _, func in inspect.getmembers(module, inspect.iscoroutinefunction):
        if func.__name__.startswith("_"):
            continue
        if func.__module__ != module.__name__:
            # Skip imported functions
            continue

        params = list(inspect.signature(func).parameters.values())
        if not params or params[0].name != "client":
            log.debug(
                "Skipping %s.%s: first parameter must be 'client'",
                module.__name__,
                func.__name__,
            )
            continue

        yield func


# --- Wrapping / registration ---------------------------------------------- #


def _wrap_tool(
    func: Callable, client_provider: Callable[[], BookStackClient]
) -> Callable:
    """
    Return a wrapper that injects client and hides it from the signature.
    Failures surface as ToolError carrying a sanitized message; the detail is
    logged, never returned to the caller.
    """
    original_sig = inspect.signature(func)
    type_hints = get_type_hints(func)

    new_params = []
    for i, (name, param) in enumerate(original_sig.parameters.items()):
        if i == 0 and name == "client":
            continue  # drop injected client
        ann = type_hints.get(name, param.annotation)
        new_params.append(param.replace(annotation=ann))

    return_ann = type_hints.get("return", original_sig.return_annotation)
    new_sig = inspect.Signature(parameters=new_params, return_annotation=return_ann)

    async def wrapped(*args, **kwargs):
        client = client_provider()
        try:
            return await func(client, *args, **kwargs)
        except Exception as exc:
            log_event(
                "tool.error",
                logger=log,
                tool=func.__name__,
                error_type=type(exc).__name__,
                status=getattr(exc, "status_code", None),
            )
            raise ToolError(describe_error(exc)) from exc

    wrapped.__name__ = func.__name__
    wrapped.__doc__ = func.__doc__
    wrapped.__module__ = func.__module__
    wrapped.__signature__ = new_sig  # type: ignore[attr-defined]
    return wrapped


def register_discovered_tools(
    app,
    client_provider: Union[Callable[[], BookStackClient], BookStackClient],
    modules: Optional[List[ModuleType]] = None,
    *,
    enable_write: Optional[bool] = None,
) -> List[str]:
    """
    Register discovered tools on an app that exposes a .tool decorator.
    Write tools are left out unless writes are enabled (defaults to the
    client's setting). Returns the registered tool names.
    """
    if isinstance(client_provider, BookStackClient):
        _client = client_provider

        def client_provider():
            return _client

    if not hasattr(app, "tool"):
        raise TypeError("app must expose a 'tool' decorator")

    if enable_write is None:
        enable_write = client_provider().enable_write

    modules = modules or discover_tool_modules()
    seen_names: Set[str] = set()
    registered: List[str] = []

    for module in modules:
        for func in iter_tool_functions(module):
            name = func.__name__
            if name in seen_names:
                raise ValueError(f"Duplicate tool name detected: {name}")
            seen_names.add(name)

            if is_write_tool(name) and not enable_write:
                log.debug("Skipping write tool %s (writes disabled)", name)
                continue

            wrapped = _wrap_tool(func, client_provider)
            app.tool(name=name)(wrapped)
            registered.append(name)
            log.info("Registered tool: %s (%s)", name, module.__name__)

    return registered


__all__ = [
    "WRITE_TOOL_PREFIXES",
    "discover_tool_modules",
    "is_write_tool",
    "iter_tool_functions",
    "register_discovered_tools",
]

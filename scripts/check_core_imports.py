#!/usr/bin/env python3
"""
Fail if the API-facing core imports the MCP server layer.
Only registry.py and server.py may depend on mcp.
"""

from __future__ import annotations

import ast
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent
PACKAGE_DIR = REPO_ROOT / "src" / "bookstack_mcp"

BOUNDARY_FILES = {"registry.py", "server.py", "__init__.py"}

FORBIDDEN_PREFIXES = (
    "mcp",
    "fastmcp",
    "bookstack_mcp.registry",
    "bookstack_mcp.server",
)


def is_forbidden(module: str) -> bool:
    return any(
        module == prefix or module.startswith(prefix + ".")
        for prefix in FORBIDDEN_PREFIXES
    )


def scan_file(path: Path) -> list[str]:
    errors: list[str] = []
    tree = ast.parse(path.read_text())
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                mod = alias.name
                if is_forbidden(mod):
                    errors.append(f"{path}: forbidden import '{mod}'")
        elif isinstance(node, ast.ImportFrom):
            mod = node.module or ""
            if node.level:
                mod = "bookstack_mcp." + mod if mod else "bookstack_mcp"
            if is_forbidden(mod):
                errors.append(f"{path}: forbidden import '{mod}'")
    return errors


def core_files() -> list[Path]:
    return [
        path
        for path in PACKAGE_DIR.rglob("*.py")
        if not (path.parent == PACKAGE_DIR and path.name in BOUNDARY_FILES)
    ]


def main() -> int:
    violations: list[str] = []
    for py_file in core_files():
        violations.extend(scan_file(py_file))

    if violations:
        for v in violations:
            print(v, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

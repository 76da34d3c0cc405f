from __future__ import annotations

import asyncio
import logging
import os

from mcp.server.fastmcp import FastMCP

from bookstack_mcp.client import BookStackClient
from bookstack_mcp.config import ConfigError
from bookstack_mcp.logging import setup_logging
from bookstack_mcp.registry import register_discovered_tools

log = logging.getLogger("bookstack_mcp.server")

SERVER_NAME = "bookstack-mcp"


def create_client_from_env() -> BookStackClient:
    try:
        return BookStackClient.from_env()
    except ConfigError as exc:
        raise ConfigError(
            "Missing or invalid BookStack settings: set BOOKSTACK_BASE_URL, "
            f"BOOKSTACK_TOKEN_ID and BOOKSTACK_TOKEN_SECRET ({exc})"
        ) from exc


def create_app(client: BookStackClient) -> FastMCP:
    app = FastMCP(SERVER_NAME)
    names = register_discovered_tools(app, client)
    log.info(
        "Server ready: %d tools, writes %s",
        len(names),
        "enabled" if client.enable_write else "disabled",
    )
    return app


# --- Entry point ----------------------------------------------------------- #


async def main() -> None:
    setup_logging(os.getenv("BOOKSTACK_LOG_LEVEL", "INFO"))
    client = create_client_from_env()

    async with client:
        app = create_app(client)
        await app.run_stdio_async()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()

"""MCP server — exposes the MUD and memory tools over stdio."""

from __future__ import annotations

import logging
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from clawdwars.config import ClawdwarsConfig
from clawdwars.memory import MemoryStore
from clawdwars.mud.client import MudClient
from clawdwars.tool.builtin import (
    MemoryAddNoteTool,
    MemoryGetTool,
    MemoryLoadTool,
    MemoryUpdateTool,
    MudConnectTool,
    MudDisconnectTool,
    MudReadTool,
    MudSendTool,
)
from clawdwars.tool.registry import ToolRegistry

logger = logging.getLogger(__name__)

SERVER_NAME = "clawdwars"


def build_registry(
    config: ClawdwarsConfig,
    client: MudClient | None = None,
    store: MemoryStore | None = None,
) -> ToolRegistry:
    """Create the registry with every tool wired to one client and store."""
    client = client or MudClient(config.mud)
    store = store or MemoryStore(config.memory_dir)

    registry = ToolRegistry()
    registry.register(
        MemoryLoadTool(store),
        MemoryUpdateTool(store),
        MemoryAddNoteTool(store),
        MemoryGetTool(store),
        MudConnectTool(client),
        MudSendTool(client),
        MudReadTool(client),
        MudDisconnectTool(client),
    )
    return registry


def create_server(registry: ToolRegistry) -> Server:
    server: Server = Server(SERVER_NAME)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return [
            Tool(name=t.name, description=t.description, inputSchema=t.input_schema())
            for t in registry
        ]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        content, is_error = await registry.dispatch(name, arguments)
        if is_error:
            logger.info("Tool %s returned error: %s", name, content.split("\n")[0])
        return [TextContent(type="text", text=content)]

    return server


async def run_stdio(config: ClawdwarsConfig) -> None:
    """Serve MCP over stdin/stdout until the client goes away."""
    client = MudClient(config.mud)
    registry = build_registry(config, client=client)
    server = create_server(registry)

    logger.info("MCP server running on stdio")
    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream, write_stream, server.create_initialization_options()
            )
    finally:
        if client.connected:
            await client.disconnect()

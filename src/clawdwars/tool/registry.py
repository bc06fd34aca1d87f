"""Tool registry — the name → tool table the MCP server lists and calls."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

from clawdwars.tool.base import BaseTool

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Tools keyed by their MCP name, in registration order.

    A name can only be taken once; two tools answering to the same name
    would make the listing ambiguous.
    """

    def __init__(self) -> None:
        self._tools: dict[str, BaseTool] = {}

    def register(self, *tools: BaseTool) -> None:
        for tool in tools:
            if tool.name in self._tools:
                raise ValueError(f"Tool name already taken: {tool.name}")
            self._tools[tool.name] = tool
            logger.debug("Registered tool %s", tool.name)

    def get(self, name: str) -> BaseTool | None:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    async def dispatch(
        self, name: str, arguments: dict[str, Any] | None = None
    ) -> tuple[str, bool]:
        """Run the named tool on raw call arguments.

        Returns:
            (content, is_error) tuple. An unknown name is an error result
            listing what is available, never an exception.
        """
        tool = self._tools.get(name)
        if tool is None:
            return (
                f"Unknown tool: {name}. Available tools: {', '.join(self._tools)}",
                True,
            )
        return await tool(arguments)

    def __iter__(self) -> Iterator[BaseTool]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools

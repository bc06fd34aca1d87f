"""Tool system — base classes and registry."""

from clawdwars.tool.base import BaseTool, NoParams, ToolError, ToolOk, ToolResult
from clawdwars.tool.registry import ToolRegistry

__all__ = [
    "BaseTool",
    "NoParams",
    "ToolResult",
    "ToolOk",
    "ToolError",
    "ToolRegistry",
]

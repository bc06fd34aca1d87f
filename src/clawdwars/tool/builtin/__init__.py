"""Built-in tools: the MUD connection and character memory."""

from clawdwars.tool.builtin.memory import (
    MemoryAddNoteTool,
    MemoryGetTool,
    MemoryLoadTool,
    MemoryUpdateTool,
)
from clawdwars.tool.builtin.mud import (
    MudConnectTool,
    MudDisconnectTool,
    MudReadTool,
    MudSendTool,
)

__all__ = [
    "MemoryAddNoteTool",
    "MemoryGetTool",
    "MemoryLoadTool",
    "MemoryUpdateTool",
    "MudConnectTool",
    "MudDisconnectTool",
    "MudReadTool",
    "MudSendTool",
]

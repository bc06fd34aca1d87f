"""clawdwars — let an AI agent play a telnet MUD through MCP tools."""

__version__ = "0.1.0"

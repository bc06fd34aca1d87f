"""MUD tools — connect, send, read and disconnect."""

from __future__ import annotations

import logging
from typing import ClassVar

from pydantic import BaseModel, Field

from clawdwars.mud.client import MudClient
from clawdwars.mud.errors import MudConnectionError, MudError
from clawdwars.tool.base import BaseTool, NoParams, ToolError, ToolOk, ToolResult

logger = logging.getLogger(__name__)


class MudConnectParams(BaseModel):
    host: str = Field(description="MUD server hostname or IP")
    port: int = Field(ge=1, le=65535, description="MUD server port")


class MudConnectTool(BaseTool[MudConnectParams]):
    """Open the TCP connection and return the welcome text."""

    name: ClassVar[str] = "mud_connect"
    description: ClassVar[str] = (
        "Connect to a GodWars MUD server via TCP. Returns the welcome/greeting text."
    )
    param_model: ClassVar[type[BaseModel]] = MudConnectParams

    def __init__(self, client: MudClient) -> None:
        self._client = client

    async def execute(self, params: MudConnectParams) -> ToolResult:
        try:
            greeting = await self._client.connect(params.host, params.port)
        except MudConnectionError as e:
            return ToolError(output=str(e), brief=f"connect {params.host} failed")
        except MudError as e:
            return ToolError(output=str(e))
        return ToolOk(
            output=greeting or "(Connected, no initial output yet)",
            brief=f"Connected to {params.host}:{params.port}",
        )


class MudSendParams(BaseModel):
    command: str = Field(description="Command to send to the MUD")


class MudSendTool(BaseTool[MudSendParams]):
    """Send one command line and return what came back."""

    name: ClassVar[str] = "mud_send"
    description: ClassVar[str] = (
        "Send a command to the MUD and return the response. "
        "This is the primary tool for interacting with the game."
    )
    param_model: ClassVar[type[BaseModel]] = MudSendParams

    def __init__(self, client: MudClient) -> None:
        self._client = client

    async def execute(self, params: MudSendParams) -> ToolResult:
        try:
            response = await self._client.send(params.command)
        except MudError as e:
            return ToolError(output=str(e))
        return ToolOk(
            output=response or "(No response received)",
            brief=f"Response: {len(response)} chars",
        )


class MudReadTool(BaseTool[NoParams]):
    """Long-poll for output that arrived without a command."""

    name: ClassVar[str] = "mud_read"
    description: ClassVar[str] = (
        "Read any output that has accumulated since the last read/send. "
        "Use this to check for async events like combat, chat messages, etc."
    )

    def __init__(self, client: MudClient) -> None:
        self._client = client

    async def execute(self, params: NoParams) -> ToolResult:
        try:
            text = await self._client.read()
        except MudError as e:
            return ToolError(output=str(e))
        return ToolOk(output=text or "No new output.", brief=f"{len(text)} chars")


class MudDisconnectTool(BaseTool[NoParams]):
    name: ClassVar[str] = "mud_disconnect"
    description: ClassVar[str] = "Disconnect from the MUD server and clean up."

    def __init__(self, client: MudClient) -> None:
        self._client = client

    async def execute(self, params: NoParams) -> ToolResult:
        try:
            await self._client.disconnect()
        except MudError as e:
            return ToolError(output=str(e))
        return ToolOk(output="Disconnected from MUD.")

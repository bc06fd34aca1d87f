"""Base tool classes with Pydantic parameter validation."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


@dataclass
class ToolResult:
    """Base result from a tool execution."""

    output: str = ""
    brief: str = ""  # Short description for logs
    is_error: bool = False


@dataclass
class ToolOk(ToolResult):
    """Successful tool result."""

    is_error: bool = False


@dataclass
class ToolError(ToolResult):
    """Failed tool result: a precondition, transport or validation failure."""

    is_error: bool = True


class NoParams(BaseModel):
    """Parameter model for tools that take no arguments."""


class BaseTool(ABC, Generic[T]):
    """Base class for all tools.

    Each tool declares its parameters as a Pydantic model (the type
    parameter T). Calling the tool validates the raw arguments, runs
    ``execute()`` and folds the result into a ``(content, is_error)`` pair.
    No exception escapes a tool call.

    Usage:
        class LookParams(BaseModel):
            direction: str = ""

        class LookTool(BaseTool[LookParams]):
            name = "look"
            description = "Look around"
            param_model = LookParams

            async def execute(self, params: LookParams) -> ToolResult:
                return ToolOk(output="You see a dark room.")
    """

    name: ClassVar[str]
    description: ClassVar[str]
    param_model: ClassVar[type[BaseModel]] = NoParams

    async def __call__(self, arguments: dict[str, Any] | None) -> tuple[str, bool]:
        """Validate arguments and execute.

        Returns:
            (content, is_error) tuple.
        """
        try:
            params = self.param_model.model_validate(arguments or {})
        except Exception as e:
            return f"Invalid parameters: {e}", True

        try:
            result = await self.execute(params)  # type: ignore[arg-type]
        except Exception as e:
            logger.error("Tool %s execution error: %s", self.name, e, exc_info=True)
            return f"Error executing {self.name}: {e}", True

        if result.brief:
            logger.debug("Tool %s: %s", self.name, result.brief)
        return result.output, result.is_error

    @abstractmethod
    async def execute(self, params: T) -> ToolResult:
        """Execute the tool with validated parameters."""
        ...

    def input_schema(self) -> dict[str, Any]:
        """JSON schema of the parameters, as advertised to clients."""
        schema = self.param_model.model_json_schema()
        # Strip the title Pydantic adds; clients show the tool name instead
        schema.pop("title", None)
        schema.setdefault("properties", {})
        return schema

"""Memory tools — load, update and query the character's persistent memory."""

from __future__ import annotations

import json
from typing import Any, ClassVar

from pydantic import BaseModel, Field, ValidationError

from clawdwars.memory import MemoryNotLoadedError, MemoryStore
from clawdwars.tool.base import BaseTool, ToolError, ToolOk, ToolResult


class MemoryLoadParams(BaseModel):
    character_name: str = Field(description="Name of the character to load memory for")


class MemoryLoadTool(BaseTool[MemoryLoadParams]):
    name: ClassVar[str] = "memory_load"
    description: ClassVar[str] = (
        "Load persistent memory for a character. Returns their personality, "
        "directives, goals, and session history."
    )
    param_model: ClassVar[type[BaseModel]] = MemoryLoadParams

    def __init__(self, store: MemoryStore) -> None:
        self._store = store

    async def execute(self, params: MemoryLoadParams) -> ToolResult:
        try:
            memory = await self._store.load(params.character_name)
        except ValueError as e:
            return ToolError(output=str(e))
        return ToolOk(
            output=memory.model_dump_json(indent=2),
            brief=f"Loaded {memory.character_name}",
        )


class MemoryUpdateParams(BaseModel):
    updates: dict[str, Any] = Field(
        description=(
            "Object with fields to update (personality, directives, goals, "
            "backstory, play_style, session_notes). Other keys are kept under 'extra'."
        )
    )


class MemoryUpdateTool(BaseTool[MemoryUpdateParams]):
    name: ClassVar[str] = "memory_update"
    description: ClassVar[str] = (
        "Update persistent memory for the current character. "
        "Allows updating personality, directives, goals, and notes."
    )
    param_model: ClassVar[type[BaseModel]] = MemoryUpdateParams

    def __init__(self, store: MemoryStore) -> None:
        self._store = store

    async def execute(self, params: MemoryUpdateParams) -> ToolResult:
        try:
            memory = await self._store.update(params.updates)
        except MemoryNotLoadedError as e:
            return ToolError(output=str(e))
        except ValidationError as e:
            return ToolError(output=f"Invalid memory update: {e}")
        return ToolOk(
            output=f"Updated memory for {memory.character_name}. Changes saved."
        )


class MemoryAddNoteParams(BaseModel):
    note: str = Field(description="The note to add to session history")


class MemoryAddNoteTool(BaseTool[MemoryAddNoteParams]):
    """Record a discovery, encounter or development in the session notes."""

    name: ClassVar[str] = "memory_add_note"
    description: ClassVar[str] = (
        "Add a session note to persistent memory. Useful for recording "
        "discoveries, encounters, or character development."
    )
    param_model: ClassVar[type[BaseModel]] = MemoryAddNoteParams

    def __init__(self, store: MemoryStore) -> None:
        self._store = store

    async def execute(self, params: MemoryAddNoteParams) -> ToolResult:
        try:
            await self._store.add_note(params.note)
        except MemoryNotLoadedError as e:
            return ToolError(output=str(e))
        return ToolOk(output="Note added to session history.")


class MemoryGetParams(BaseModel):
    fields: list[str] = Field(
        description=(
            "Array of field names to retrieve "
            "(e.g., ['personality', 'directives', 'goals'])"
        )
    )


class MemoryGetTool(BaseTool[MemoryGetParams]):
    name: ClassVar[str] = "memory_get"
    description: ClassVar[str] = (
        "Get specific fields from the current character's persistent memory."
    )
    param_model: ClassVar[type[BaseModel]] = MemoryGetParams

    def __init__(self, store: MemoryStore) -> None:
        self._store = store

    async def execute(self, params: MemoryGetParams) -> ToolResult:
        try:
            result = self._store.get(params.fields)
        except MemoryNotLoadedError as e:
            return ToolError(output=str(e))
        return ToolOk(output=json.dumps(result, indent=2))

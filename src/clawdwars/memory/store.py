"""MemoryStore — JSON files on disk, one per character."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any

import aiofiles
from pydantic import ValidationError

from clawdwars.memory.record import CharacterMemory, now_iso

logger = logging.getLogger(__name__)

DEFAULT_MEMORY_DIR = "~/.clawdwars/memory"

_NAME_RE = re.compile(r"[\w][\w .'-]{0,63}")


class MemoryNotLoadedError(RuntimeError):
    """A memory operation needs a character, but none has been loaded."""


class MemoryStore:
    """Loads and saves CharacterMemory records.

    Records live at ``<directory>/<character_name>.json`` as indented JSON.
    The store also tracks the *current* character, i.e. the one most
    recently passed to ``load()``; update/add_note/get act on it.
    """

    def __init__(self, directory: str | Path = DEFAULT_MEMORY_DIR) -> None:
        self.directory = Path(directory).expanduser()
        self.current: CharacterMemory | None = None

    def path_for(self, character_name: str) -> Path:
        """Path of a character's record.

        Raises:
            ValueError: The name would not make a safe file name.
        """
        if not _NAME_RE.fullmatch(character_name) or ".." in character_name:
            raise ValueError(f"Invalid character name: {character_name!r}")
        return self.directory / f"{character_name}.json"

    async def load(self, character_name: str) -> CharacterMemory:
        """Load a character and make it current.

        A missing or unreadable file yields a fresh default record.
        """
        path = self.path_for(character_name)
        memory: CharacterMemory | None = None
        if path.exists():
            try:
                async with aiofiles.open(path, "r", encoding="utf-8") as f:
                    memory = CharacterMemory.model_validate(json.loads(await f.read()))
            except (OSError, json.JSONDecodeError, ValidationError) as e:
                logger.error("Error loading memory for %s: %s", character_name, e)

        if memory is None:
            memory = CharacterMemory(character_name=character_name)
        self.current = memory
        return memory

    async def save(self, memory: CharacterMemory) -> bool:
        """Write a record to disk. Returns False (and logs) on failure."""
        try:
            path = self.path_for(memory.character_name)
            self.directory.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "w", encoding="utf-8") as f:
                await f.write(memory.model_dump_json(indent=2))
        except (OSError, ValueError) as e:
            logger.error("Error saving memory for %s: %s", memory.character_name, e)
            return False
        logger.info("Saved memory for %s", memory.character_name)
        return True

    def require_current(self) -> CharacterMemory:
        if self.current is None:
            raise MemoryNotLoadedError(
                "No character memory loaded. Use memory_load first."
            )
        return self.current

    async def update(self, updates: dict[str, Any]) -> CharacterMemory:
        """Merge ``updates`` into the current record and save it.

        Raises:
            MemoryNotLoadedError: No character is loaded.
            pydantic.ValidationError: A known field got a value of the wrong type.
        """
        self.current = self.require_current().merged(updates)
        await self.save(self.current)
        return self.current

    async def add_note(self, note: str) -> CharacterMemory:
        """Append a timestamped note to the current record and save it."""
        memory = self.require_current()
        memory.session_notes.append(f"[{now_iso()}] {note}")
        await self.save(memory)
        return memory

    def get(self, fields: list[str]) -> dict[str, Any]:
        return self.require_current().get_fields(fields)

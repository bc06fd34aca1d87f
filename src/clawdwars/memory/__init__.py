"""Character memory — persistent personality, goals and notes per character."""

from clawdwars.memory.record import CharacterMemory
from clawdwars.memory.store import MemoryNotLoadedError, MemoryStore

__all__ = [
    "CharacterMemory",
    "MemoryStore",
    "MemoryNotLoadedError",
]

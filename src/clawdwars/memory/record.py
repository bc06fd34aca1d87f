"""CharacterMemory — the persistent profile of one played character."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, ClassVar

from pydantic import BaseModel, Field


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class CharacterMemory(BaseModel):
    """Fixed-schema memory record.

    Named fields cover everything the agent is expected to track. Anything
    else goes into ``extra``, so an update can never inject arbitrary
    attributes into the record itself.
    """

    character_name: str
    personality: str = "Determined and curious adventurer"
    directives: list[str] = Field(
        default_factory=lambda: [
            "Explore the world",
            "Gather experience",
            "Help allies",
        ]
    )
    goals: list[str] = Field(
        default_factory=lambda: ["Level up", "Master combat", "Discover lore"]
    )
    backstory: str = "A wanderer seeking glory and knowledge"
    play_style: str = "Aggressive combat, exploration-focused"
    last_session: str = Field(default_factory=now_iso)
    session_notes: list[str] = Field(default_factory=list)
    extra: dict[str, Any] = Field(
        default_factory=dict, description="Free-form fields outside the schema"
    )

    # Fields an update may not overwrite.
    READ_ONLY: ClassVar[frozenset[str]] = frozenset({"character_name", "last_session"})

    def merged(self, updates: dict[str, Any]) -> CharacterMemory:
        """Return a copy with ``updates`` applied.

        Known fields are validated against the schema. Unknown keys land in
        ``extra``. Read-only fields are left untouched.

        Raises:
            pydantic.ValidationError: A known field got a value of the wrong type.
        """
        data = self.model_dump()
        extra = dict(data["extra"])
        for key, value in updates.items():
            if key in self.READ_ONLY:
                continue
            if key == "extra" and isinstance(value, dict):
                extra.update(value)
            elif key in type(self).model_fields:
                data[key] = value
            else:
                extra[key] = value
        data["extra"] = extra
        data["last_session"] = now_iso()
        return type(self).model_validate(data)

    def get_fields(self, fields: list[str]) -> dict[str, Any]:
        """Look up fields by name, including ``extra`` keys. Unknown names are skipped."""
        data = self.model_dump()
        result: dict[str, Any] = {}
        for name in fields:
            if name in data:
                result[name] = data[name]
            elif name in self.extra:
                result[name] = self.extra[name]
        return result

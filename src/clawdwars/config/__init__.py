"""Configuration — Pydantic models for clawdwars settings."""

from __future__ import annotations

import os
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from clawdwars.memory.store import DEFAULT_MEMORY_DIR


class MudConfig(BaseModel):
    """Timing and I/O settings for MUD connections. Times are in seconds."""

    connect_timeout: float = Field(
        default=10.0, gt=0, description="Max time for the TCP handshake"
    )
    greeting_wait: float = Field(
        default=2.0, ge=0, description="Time to collect the welcome text after connecting"
    )
    response_wait: float = Field(
        default=0.5, ge=0, description="Time to let a command's response arrive"
    )
    read_timeout: float = Field(
        default=5.0, ge=0, description="Long-poll window for mud_read"
    )
    read_chunk_size: int = Field(default=4096, gt=0)


class ClawdwarsConfig(BaseModel):
    """Top-level clawdwars configuration."""

    mud: MudConfig = Field(default_factory=MudConfig)
    memory_dir: str = Field(
        default=DEFAULT_MEMORY_DIR, description="Directory for character memory files"
    )

    @classmethod
    def load(cls, config_path: str | None = None) -> ClawdwarsConfig:
        """Load config from file, env vars, or defaults.

        Priority: env vars > config file > defaults.

        Env vars:
            CLAWDWARS_CONNECT_TIMEOUT  - TCP connect timeout
            CLAWDWARS_GREETING_WAIT    - Greeting collection window
            CLAWDWARS_RESPONSE_WAIT    - Wait after mud_send before draining
            CLAWDWARS_READ_TIMEOUT     - mud_read long-poll window
            CLAWDWARS_MEMORY_DIR       - Character memory directory
        """
        load_dotenv(override=True)

        config_data: dict[str, Any] = {}

        if config_path and os.path.exists(config_path):
            import json

            with open(config_path) as f:
                config_data = json.load(f)

        mud = config_data.get("mud", {})
        for env_name, key in (
            ("CLAWDWARS_CONNECT_TIMEOUT", "connect_timeout"),
            ("CLAWDWARS_GREETING_WAIT", "greeting_wait"),
            ("CLAWDWARS_RESPONSE_WAIT", "response_wait"),
            ("CLAWDWARS_READ_TIMEOUT", "read_timeout"),
        ):
            value = os.environ.get(env_name)
            if value:
                mud[key] = float(value)
        if mud:
            config_data["mud"] = mud

        env_memory_dir = os.environ.get("CLAWDWARS_MEMORY_DIR")
        if env_memory_dir:
            config_data["memory_dir"] = env_memory_dir

        return cls.model_validate(config_data)

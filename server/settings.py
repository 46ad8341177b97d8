"""
Server configuration using pydantic-settings.

Environment variables (prefix: MACHIKORO_):
    MACHIKORO_HOST         - Bind host (default: 127.0.0.1)
    MACHIKORO_PORT         - Bind port (default: 3000)
    MACHIKORO_LOG_LEVEL    - Root log level (default: INFO)
    MACHIKORO_CODE_LENGTH  - Length of minted match codes (default: 6)
    MACHIKORO_MAX_PLAYERS  - Optional seat limit per match
    MACHIKORO_DICE_SEED    - Optional seed for server-side dice
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from machikoro.config import GameConfig


class ServerSettings(BaseSettings):
    """Configuration for the match server."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="MACHIKORO_",
    )

    host: str = Field(default="127.0.0.1", description="Host the server binds to.")
    port: int = Field(default=3000, gt=0, lt=65536, description="Port the server binds to.")
    log_level: str = Field(default="INFO", description="Root logging level.")
    code_length: int = Field(default=6, ge=4, le=12, description="Length of minted match codes.")
    max_players: Optional[int] = Field(
        default=None,
        ge=2,
        description="Maximum players per match (unlimited when unset).",
    )
    dice_seed: Optional[int] = Field(
        default=None,
        description="Seed for server-side dice rolls; unset means nondeterministic.",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: Optional[str]) -> str:
        if not value:
            return "INFO"
        return str(value).upper()

    def game_config(self) -> GameConfig:
        """Build the engine configuration shared by every match."""
        return GameConfig(max_players=self.max_players, seed=self.dice_seed)


@lru_cache
def get_server_settings() -> ServerSettings:
    """Return cached server settings instance."""
    return ServerSettings()

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Any, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    # App
    APP_NAME: str = "Duet"
    APP_ENV: str = "dev"
    API_PREFIX: str = "/api/v1"
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: Annotated[List[str], NoDecode] = Field(default_factory=lambda: ["*"])

    # Presence: closed set of identities allowed to announce themselves (empty = anyone)
    ALLOWED_IDENTITIES: Annotated[List[str], NoDecode] = Field(default_factory=list)

    # Signaling relay: one permanent room
    SIGNAL_ROOM: str = "SILENT_SIGNAL_FOREVER_2026"
    SIGNAL_SERVICE_NAME: str = "The Silent Signal - Signaling Server"

    # Record store backend: memory | sql
    RECORD_STORE_BACKEND: str = "memory"
    DATABASE_URL: str = "sqlite+aiosqlite:///./duet.db"

    # Server -> client keepalive pings on /ws (seconds, 0 disables)
    WS_HEARTBEAT_SEC: float = 30.0

    @field_validator("CORS_ORIGINS", "ALLOWED_IDENTITIES", mode="before")
    @classmethod
    def _split_csv(cls, value: Any) -> Any:
        # allow comma-separated env for lists
        if isinstance(value, str):
            return [x.strip() for x in value.split(",") if x.strip()]
        return value


@lru_cache()
def get_settings() -> Settings:
    return Settings()

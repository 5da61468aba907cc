"""
Runtime settings for the Boredom Dial service, read from the environment.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3001, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    bots_enabled: bool = Field(default=True, alias="BOTS_ENABLED")
    sweep_interval: float = Field(default=60.0, gt=0, alias="SWEEP_INTERVAL")
    room_idle_ttl: float = Field(default=3600.0, ge=0, alias="ROOM_IDLE_TTL")
    send_queue_size: int = Field(default=32, gt=0, alias="SEND_QUEUE_SIZE")

    cors_allow_origins: list[str] = Field(default=["*"], alias="CORS_ALLOW_ORIGINS")


@lru_cache
def get_settings() -> Settings:
    return Settings()

import os
from functools import lru_cache
from typing import List

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Logging
    LOG_LEVEL: str = "INFO"

    # HTTP
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # Transcript store
    DEFAULT_STREAM_ID: str = "default"

    # Feed client (producer side)
    TRANSCRIPT_FEED_URL: str = "http://localhost:8000"
    FEED_TIMEOUT: float = 5.0

    # General
    ENV: str = os.getenv("ENV", "development")
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Ensure .env is loaded once
    load_dotenv(override=False)
    return Settings()

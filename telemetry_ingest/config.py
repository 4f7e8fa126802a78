from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Literal

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    SERVICE_PORT: int = 8080
    MAX_EVENT_SIZE: int = 65536
    LOG_JSON: bool = True
    LOG_LEVEL: str = "INFO"
    # Store backend selection: "memory" or "sql"
    STORE_ADAPTER: Literal["memory", "sql"] = "sql"
    DATABASE_URL: str = "sqlite:///./telemetry.db"
    DATABASE_ECHO: bool = False
    # Authentication
    TELEMETRY_KEY_HEADER: str = "X-Telemetry-Key"
    TELEMETRY_KEYS: str = ""  # Comma-separated list of accepted keys
    ENFORCE_TELEMETRY_KEY: bool = False  # Compare the key value, not just its presence

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Loading priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values below
    """

    # Environment
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Application
    app_name: str = "Link Directory"
    app_version: str = "1.0.0"

    # Entry store (the remote document store behind the gateway)
    store_backend: str = "sql"  # Options: "sql", "redis", "memory"
    database_url: str = "sqlite:///./link_directory.db"
    redis_url: str = "redis://localhost:6379/0"
    redis_key_prefix: str = "entries"

    # Hits
    # False: send hits + 1 as known by the caller (overwrite)
    # True: ask the store to add 1 itself
    atomic_hit_increment: bool = False

    # Links without this prefix get it prepended at render time
    link_scheme: str = "https://"

    # Category names, id = position in the list
    categories: List[str] = ["Startup", "Internal", "Project", "Community", "Misc"]

    # Diagnostics channel (store failures)
    diagnostics_backend: str = "memory"  # Options: "memory", "redis_streams"
    diagnostics_queue_name: str = "store_failures"
    diagnostics_consumer_group: str = "diagnostics_workers"
    diagnostics_batch_size: int = 100
    diagnostics_poll_interval: float = 1.0  # Seconds between polls when idle
    diagnostics_worker_enabled: bool = True

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Create settings instance
settings = Settings()

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Client settings validated via Pydantic.

    Values are loaded from environment variables and/or a .env file.
    """

    # Classification service
    api_url: str = "http://localhost:8000/api/v1"
    request_timeout: float = 30.0

    # Local result store
    store_path: str = "data/email-store.json"
    history_limit: int = 50

    # Remote views
    remote_history_limit: int = 50

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Gracefully handles missing .env files (e.g. in CI/testing) by falling
    back to environment variables and defaults.
    """
    try:
        return Settings()
    except Exception:
        # If .env is missing or unreadable, build settings from env vars only.
        return Settings(_env_file=None)  # type: ignore[call-arg]


settings = get_settings()

"""Application configuration loaded from environment variables and .env file."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Values are loaded from environment variables first,
    then from a .env file in the project root as fallback.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    DATABASE_URL: str = "sqlite:///./dev.db"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Static content
    TRICK_DATA_PATH: str = "src/data/tricks.json"

    # Bond maintenance (milliseconds)
    DECAY_SWEEP_INTERVAL_MS: int = 60_000
    DECAY_IDLE_THRESHOLD_MS: int = 300_000
    SCHEDULER_POLL_SECONDS: float = 1.0

    # Key-value store entries, one per engine
    TAMING_STORE_KEY: str = "feral-friends-taming-progress"
    BONDING_STORE_KEY: str = "feral-friends-bonding-progress"
    TRICK_STORE_KEY: str = "feral-friends-trick-progress"


settings = Settings()

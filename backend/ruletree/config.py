"""Engine configuration via environment variables."""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Engine settings loaded from environment variables (prefix ``RULETREE_``)."""

    # Logging
    DEBUG: bool = False
    LOG_LEVEL: str = "info"

    # Messages
    DEFAULT_MESSAGE: str = "Please, fix the field."

    # List rules keep children for indices that disappeared when a list shrank,
    # unless pruning is switched on.
    PRUNE_STALE_LIST_ITEMS: bool = False

    model_config = {"env_prefix": "RULETREE_", "env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()

"""Runtime settings and logging setup.

Settings are read from ``SISTAHOLOGY_*`` environment variables or a local
``.env`` file.
"""

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class Settings(BaseSettings):
    """Application settings.

    Attributes:
        log_level (str): Level for the ``sistahology`` logger hierarchy.
        toast_cooldown_seconds (float): Default window during which a keyed
            notification is shown only once.
        max_field_size (int): Upper bound, in characters, for sanitized rich
            text accepted through the HTTP adapter.
    """
    log_level: str = "INFO"
    toast_cooldown_seconds: float = 5.0
    max_field_size: int = 65536

    model_config = SettingsConfigDict(
        env_prefix="SISTAHOLOGY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger("sistahology").setLevel(settings.log_level.upper())

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Messages
    DEFAULT_LOCALE: str = "en"
    MESSAGES_MODE: Literal["static", "i18n"] = "static"
    MESSAGES_FILE: str | None = None  # Applied to schemas that configure none
    I18N_LOAD_PATH: list[str] = []    # YAML translation files for the default i18n backend

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False  # True for production (structured JSON), False for dev (colored)

    model_config = SettingsConfigDict(env_prefix="FORMRULES_", env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()

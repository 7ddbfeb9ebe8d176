from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parent.parent


class AppSettings(BaseSettings):
    """Environment-driven application configuration."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "GlucoTrack"
    APP_ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    BASE_DIR: Path = Field(default_factory=lambda: PACKAGE_DIR.parent)
    DATA_DIR: Path = Field(default_factory=lambda: PACKAGE_DIR.parent / "data")
    TEMPLATES_DIR: Path | None = None
    STATIC_DIR: Path | None = None

    # Shared write-access code. Blank means nobody can write.
    APP_ACCESS_CODE: str | None = None
    ACCESS_COOKIE_NAME: str = "gluco_access"
    ACCESS_COOKIE_MAX_AGE: int = 60 * 60 * 24 * 30

    # Signs the flash-message session cookie only.
    APP_SECRET: str = "dev-insecure-secret-change-me"
    SESSION_COOKIE_NAME: str = "gluco_session"

    DB_URL: str = Field(default="", validation_alias=AliasChoices("DATABASE_URL", "DB_URL"))

    READINGS_DEFAULT_LIMIT: int = 50
    READINGS_MAX_LIMIT: int = 500

    S3_BUCKET: str | None = None
    S3_REGION: str | None = None
    S3_ACCESS_KEY: str | None = None
    S3_SECRET_KEY: str | None = None
    S3_ENDPOINT_URL: str | None = None
    S3_PUBLIC_URL: str | None = None

    GEMINI_API_KEY: str | None = None
    GEMINI_MODEL: str = "gemini-2.5-flash-lite"

    HOST: str = "0.0.0.0"
    PORT: int = 8000

    @property
    def is_production(self) -> bool:
        return self.APP_ENV.strip().lower() in {"prod", "production"}

    @property
    def photos_dir(self) -> Path:
        return self.DATA_DIR / "photos"

    @property
    def database_url(self) -> str:
        return self.DB_URL or f"sqlite:///{self.DATA_DIR / 'glucotrack.db'}"


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    settings = AppSettings()
    settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
    if settings.TEMPLATES_DIR is None:
        settings.TEMPLATES_DIR = PACKAGE_DIR / "templates"
    if settings.STATIC_DIR is None:
        settings.STATIC_DIR = PACKAGE_DIR / "static"
    return settings


settings = get_settings()

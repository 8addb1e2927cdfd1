from datetime import time
from functools import lru_cache
from pathlib import Path
from typing import Annotated, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_name: str = Field(default="Unrecorded API", alias="APP_NAME", description="Human readable service name")
    environment: str = Field(default="development", alias="ENVIRONMENT", description="Deployment environment name")
    debug: bool = Field(default=False, alias="DEBUG", description="Enable debug mode")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Root log level")

    cors_origins: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: ["http://localhost", "http://localhost:8080"],
        alias="CORS_ORIGINS",
        description="List of allowed CORS origins",
    )

    database_url_override: str | None = Field(
        default=None,
        alias="DATABASE_URL",
        description="Full SQLAlchemy URL. Takes precedence over the DB_* parts.",
    )
    database_user: str = Field(default="unrecorded", alias="DB_USER")
    database_password: str = Field(default="unrecorded", alias="DB_PASSWORD")
    database_host: str = Field(default="db", alias="DB_HOST")
    database_port: int = Field(default=3306, alias="DB_PORT")
    database_name: str = Field(default="unrecorded", alias="DB_NAME")

    session_ttl_minutes: int = Field(
        default=60 * 24,
        alias="SESSION_TTL_MINUTES",
        description="Lifetime applied to new or renewed sessions when no expiry is given.",
    )

    housekeeping_enabled: bool = Field(
        default=True,
        alias="HOUSEKEEPING_ENABLED",
        description="Run the daily notification cleanup inside the API process.",
    )
    housekeeping_run_at: time = Field(
        default=time(hour=1),
        alias="HOUSEKEEPING_RUN_AT",
        description="UTC wall-clock time (HH:MM) of the daily notification cleanup.",
    )

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parents[1] / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return (
            f"mysql+pymysql://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v):  # type: ignore[override]
        if v in (None, "", Ellipsis):
            return []
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        if isinstance(v, (list, tuple, set)):
            return list(v)
        return v

    @field_validator("session_ttl_minutes")
    @classmethod
    def ensure_positive_ttl(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("SESSION_TTL_MINUTES must be positive")
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()

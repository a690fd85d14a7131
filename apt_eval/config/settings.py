"""Application settings loaded from environment variables."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DATABASE_FILENAME = "apartments.db"

_LOG_LEVELS = frozenset({"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"})


class Settings(BaseSettings):
    """Runtime configuration for the API process and its listeners."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: str = "apt-eval"

    data_dir: Path = Path("./data")
    static_dir: Path = Path("./static")

    host: str = "0.0.0.0"
    port: int = Field(default=8443, ge=0, le=65535)
    http_port: int = Field(default=8080, ge=0, le=65535)
    tls_enabled: bool = True
    cert_file: Path = Path("./certs/wildcard.crt")
    key_file: Path = Path("./certs/wildcard.key")

    log_level: str = "INFO"
    shutdown_grace_seconds: float = Field(default=5.0, gt=0)

    db_pool_size: int = Field(default=25, ge=1)
    db_pool_recycle_seconds: int = 300
    # None waits for a free pooled connection indefinitely.
    db_pool_timeout_seconds: float | None = None
    db_busy_timeout_seconds: float = 15.0
    sql_echo: bool = False

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> str:
        if value is None:
            return "INFO"
        level = str(value).strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(
                f"Invalid log_level: {value}. "
                f"Valid values are: {', '.join(sorted(_LOG_LEVELS))}"
            )
        return level

    @property
    def database_path(self) -> Path:
        return self.data_dir / DATABASE_FILENAME

    @property
    def database_url(self) -> str:
        return f"sqlite+aiosqlite:///{self.database_path}"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()

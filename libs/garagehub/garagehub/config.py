"""Configuration management using pydantic-settings."""

from pathlib import Path
from typing import Any
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from garagehub.exceptions import ConfigurationError

_ENV_FILES = (".env", "../.env", "../../.env")

_REPO_ROOT = Path(__file__).resolve().parents[3]


def _resolve_repo_path(value: str) -> str:
    raw = str(value or "").strip()
    if not raw:
        return raw
    p = Path(raw)
    if p.is_absolute():
        return str(p)
    return str((_REPO_ROOT / p).resolve())


class SMTPConfig(BaseSettings):
    """Outgoing mail (password reset OTP)."""

    model_config = SettingsConfigDict(
        env_prefix="SMTP_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = "smtp.gmail.com"
    port: int = 587
    user: str = ""
    password: str = ""
    from_email: str = ""
    use_tls: bool = True
    timeout_s: float = Field(default=10.0, gt=0)
    max_attempts: int = Field(default=3, ge=1)

    @property
    def configured(self) -> bool:
        return bool(self.user and self.password)

    @property
    def sender(self) -> str:
        return self.from_email or self.user


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"
    console: bool = True
    file: str | None = None
    max_bytes: int = Field(default=10 * 1024 * 1024, ge=0)
    backup_count: int = Field(default=5, ge=0)
    quiet: list[str] = Field(default_factory=lambda: ["psycopg.pool", "python_multipart", "httpx"])


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILES, env_file_encoding="utf-8", extra="ignore"
    )

    data_dir: str = "./data"
    log_dir: str = "./logs"

    # Blobs (uploaded images)
    upload_dir: str = "./uploads"
    upload_url_prefix: str = "uploads"
    upload_max_bytes: int = Field(default=5 * 1024 * 1024, ge=1)

    # Database
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_db: str = "garagehub"
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_pool_min_size: int = Field(default=2, ge=1)
    postgres_pool_max_size: int = Field(default=10, ge=1)

    # Redis
    redis_url: str = "redis://localhost:6379"
    otp_ttl_seconds: int = Field(default=10 * 60, ge=1)

    # HTTP
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    smtp: SMTPConfig = SMTPConfig()
    logging: LoggingSettings = LoggingSettings()

    @model_validator(mode="after")
    def _validate(self) -> "Settings":
        prefix = str(self.upload_url_prefix or "").strip().strip("/")
        if not prefix or "/" in prefix:
            raise ConfigurationError(
                f"UPLOAD_URL_PREFIX must be a single path segment, got {self.upload_url_prefix!r}"
            )
        self.upload_url_prefix = prefix
        if self.postgres_pool_max_size < self.postgres_pool_min_size:
            raise ConfigurationError("POSTGRES_POOL_MAX_SIZE must be >= POSTGRES_POOL_MIN_SIZE")
        # Keep paths stable when apps are started from their own directory.
        self.data_dir = _resolve_repo_path(self.data_dir)
        self.log_dir = _resolve_repo_path(self.log_dir)
        self.upload_dir = _resolve_repo_path(self.upload_dir)
        return self

    def model_post_init(self, __context: Any) -> None:
        for p in (self.data_dir, self.log_dir, self.upload_dir):
            Path(p).mkdir(parents=True, exist_ok=True)

    @property
    def database_url(self) -> str:
        return f"postgresql://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"

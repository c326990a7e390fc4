"""Configuration management for VidTube."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="VIDTUBE_", extra="ignore"
    )

    # Session token verification
    app_secret_key: str

    # Database
    database_url: str = "sqlite+aiosqlite:///./dev.db"

    # Media storage
    media_backend: str = Field(default="local", pattern="^(local|gcs)$")
    media_local_path: str = Field(default="./media")
    media_url_base: str = Field(default="http://localhost:8000/media")
    upload_tmp_dir: str = Field(default="./tmp/uploads")
    large_file_limit_bytes: int = 100 * 1024 * 1024  # chunked upload above this

    # Google Cloud Storage (only needed if media_backend=gcs)
    gcs_bucket_name: str = Field(default="")
    gcs_credentials_file: str = Field(default="")

    # Timeouts for store and media calls
    store_timeout_seconds: float = 10.0
    media_timeout_seconds: float = 120.0

    # Pagination
    page_size_default: int = 10
    page_size_max: int = 100

    # CORS
    frontend_origin: str = "http://localhost:5173"

    # Environment
    env: str = Field(default="dev", pattern="^(dev|prod)$")
    log_level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR)$")


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance (singleton pattern)."""
    global _settings
    if _settings is None:
        _settings = Settings()  # type: ignore[call-arg]
    return _settings

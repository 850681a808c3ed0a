"""
Application Configuration
Loads settings from environment variables.
"""

from typing import List
from pydantic_settings import BaseSettings
from pydantic import field_validator
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    APP_NAME: str = "Stitcher API"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    PORT: int = 4000

    # Database - SQLite for local dev, PostgreSQL for production
    DATABASE_URL: str = "sqlite:///./stitcher.db"

    # Redis
    REDIS_URL: str = "redis://localhost:6379"
    VIDEO_QUEUE_NAME: str = "video-jobs"

    # Object storage - S3 compatible (Cloudflare R2 in production)
    S3_ENDPOINT: str = ""
    S3_BUCKET: str = ""
    S3_ACCESS_KEY: str = ""
    S3_SECRET_KEY: str = ""
    S3_REGION: str = "auto"
    S3_PUBLIC_URL: str = ""

    # Local storage fallback
    LOCAL_STORAGE_PATH: str = "./uploads"
    USE_LOCAL_STORAGE: bool = False

    # Per-job scratch space; empty means the system temp dir
    SCRATCH_DIR: str = ""

    # Media tooling
    FFMPEG_BINARY: str = "ffmpeg"
    FFPROBE_BINARY: str = "ffprobe"

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    # Worker settings (seconds)
    DOWNLOAD_TIMEOUT: float = 60.0
    TRANSCODE_TIMEOUT: float = 600.0
    UPLOAD_TIMEOUT: float = 120.0
    WORKER_ERROR_BACKOFF: float = 5.0
    # Idle BRPOP wait; the loop re-checks its stop flag between waits
    WORKER_POP_TIMEOUT: int = 5

    # Largest source file a worker will download
    MAX_DOWNLOAD_BYTES: int = 500 * 1024 * 1024

    # Image upload pass-through
    MAX_IMAGE_UPLOAD_BYTES: int = 30 * 1024 * 1024

    @field_validator('S3_ACCESS_KEY', 'S3_SECRET_KEY', 'S3_ENDPOINT', 'S3_BUCKET', 'S3_PUBLIC_URL', mode='before')
    @classmethod
    def strip_credentials(cls, v):
        """Strip whitespace and newlines from values loaded from secrets."""
        if isinstance(v, str):
            return v.strip()
        return v

    @property
    def object_store_configured(self) -> bool:
        """True when every S3 setting needed for an upload is present."""
        return all([
            self.S3_ENDPOINT,
            self.S3_BUCKET,
            self.S3_ACCESS_KEY,
            self.S3_SECRET_KEY,
            self.S3_PUBLIC_URL,
        ])

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()

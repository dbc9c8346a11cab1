"""
Core configuration for CampJournal application.
Loads settings from environment variables.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # App
    APP_NAME: str = "CampJournal"
    APP_ENV: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./campjournal.db"
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 10
    DB_SCHEMA: str = ""  # e.g. "campjournal" on Postgres; empty disables schema-qualified tables

    # Redis (Celery broker)
    REDIS_URL: str = "redis://localhost:6379/0"

    # JWT
    JWT_SECRET_KEY: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    JWT_REFRESH_TOKEN_EXPIRE_DAYS: int = 30

    # Storage Provider
    STORAGE_PROVIDER: str = "local"  # "s3" or "local"

    # S3 Compatible (R2, AWS, MinIO, Supabase storage)
    S3_ENDPOINT_URL: str = ""
    S3_ACCESS_KEY_ID: str = ""
    S3_SECRET_ACCESS_KEY: str = ""
    S3_REGION_NAME: str = "auto"

    # Local filesystem storage (development)
    LOCAL_STORAGE_PATH: str = "./storage"

    # Base URL objects are publicly served from, "{base}/{bucket}/{path}"
    PUBLIC_STORAGE_URL: str = "http://localhost:8000/storage"

    # Uploads
    MAX_FILE_SIZE_MB: int = 5

    # Google Places
    GOOGLE_MAPS_API_KEY: str = ""
    PLACES_API_URL: str = "https://maps.googleapis.com/maps/api/place"
    PLACES_TIMEOUT_SECONDS: float = 10.0
    PLACES_CACHE_TTL_SECONDS: int = 3600
    PLACES_CACHE_MAX_ENTRIES: int = 1024

    # Coordinate backfill worker
    BACKFILL_DELAY_SECONDS: float = 0.2

    @property
    def allowed_origins_list(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into list."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    @property
    def max_file_size_bytes(self) -> int:
        """Convert max file size to bytes."""
        return self.MAX_FILE_SIZE_MB * 1024 * 1024

    @property
    def db_schema(self) -> Optional[str]:
        return self.DB_SCHEMA or None


settings = Settings()

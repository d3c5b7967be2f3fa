import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError, model_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # Database settings: either a full URL or the individual parts
    DATABASE_URL: Optional[str] = None
    DB_USER: Optional[str] = None
    DB_PASSWORD: Optional[str] = None
    DB_HOST: Optional[str] = None
    DB_PORT: Optional[str] = None
    DB_NAME: Optional[str] = None
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 20

    # JWT settings (required)
    JWT_ACCESS_SECRET: str
    JWT_REFRESH_SECRET: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    REMEMBER_ME_REFRESH_TOKEN_EXPIRE_DAYS: int = 30
    BCRYPT_ROUNDS: int = 12

    # Comma-separated list of allowed origins (required)
    CORS_ORIGINS: str

    # Rate limiting, per client address
    RATE_LIMIT_REQUESTS: int = 100
    RATE_LIMIT_WINDOW_SECONDS: int = 900

    LOG_LEVEL: str = "INFO"

    # Platform sync
    GFG_API_ENDPOINTS: str = (
        "https://geeks-for-geeks-api.vercel.app/{username},"
        "https://gfg-stats.tashif.codes/{username}"
    )
    LEETCODE_API_ENDPOINTS: str = (
        "https://alfa-leetcode-api.onrender.com/{username}/acSubmission?limit=5000,"
        "https://leetcode-api-faisalshohag.vercel.app/{username}"
    )
    SYNC_ATTEMPTS_PER_ENDPOINT: int = 3
    SYNC_RETRY_DELAY_SECONDS: float = 2.0
    SYNC_TIMEOUT_SECONDS: float = 10.0
    SYNC_BATCH_SIZE: int = 5
    SYNC_BATCH_DELAY_SECONDS: float = 2.0
    LEETCODE_ALLOW_PARTIAL_MATCH: bool = True

    # Celery Configuration (optional)
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/0"

    # Seeded on startup when both are set
    DEFAULT_ADMIN_USERNAME: Optional[str] = None
    DEFAULT_ADMIN_PASSWORD: Optional[str] = None

    class Config:
        # Look for env file in project root, even when running from subdirectories
        env_file = os.getenv("ENV_FILE") or str(Path(__file__).parent.parent.parent / "local.env")
        # Allow case-insensitive environment variable names
        case_sensitive = False
        extra = "ignore"

    @model_validator(mode="after")
    def check_database(self) -> "Settings":
        if self.DATABASE_URL:
            return self
        missing = [name for name in ("DB_USER", "DB_PASSWORD", "DB_HOST", "DB_PORT", "DB_NAME")
                   if not getattr(self, name)]
        if missing:
            raise ValueError(f"DATABASE_URL or {', '.join(missing)} must be set")
        return self

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @property
    def cors_origins(self) -> List[str]:
        return _split(self.CORS_ORIGINS)

    @property
    def gfg_endpoints(self) -> List[str]:
        return _split(self.GFG_API_ENDPOINTS)

    @property
    def leetcode_endpoints(self) -> List[str]:
        return _split(self.LEETCODE_API_ENDPOINTS)


def _split(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def load_settings() -> Settings:
    try:
        return Settings()
    except ValidationError as e:
        logging.basicConfig(level=logging.INFO)
        logger.critical("Missing or invalid configuration, refusing to start:\n%s", e)
        sys.exit(1)


settings = load_settings()

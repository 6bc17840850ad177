import os
from typing import Optional, List
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings read from the environment"""

    # Database
    DB_DSN: str = ""
    DB_POOL_SIZE: int = 5
    DB_ECHO: bool = False

    # Security
    SECRET_KEY: str = ""
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_SECONDS: int = 900  # 15 minutes
    REFRESH_TOKEN_EXPIRE_SECONDS: int = 60 * 60 * 24 * 30  # 30 days

    # CORS
    CORS_ALLOW_ORIGINS: List[str] = []
    CORS_ALLOW_CREDENTIALS: bool = True

    # Storage
    S3_ENDPOINT: str = "minio:9000"
    S3_PUBLIC_ENDPOINT: Optional[str] = None
    S3_ACCESS_KEY: str = ""
    S3_SECRET_KEY: str = ""
    S3_BUCKET: str = "tourbook"
    S3_REGION: Optional[str] = None
    S3_SECURE: bool = False
    UPLOAD_MAX_BYTES: int = 10 * 1024 * 1024

    # Rate Limiting
    RATE_LIMIT_DEFAULT: str = "100/minute"
    RATE_LIMIT_ENABLED: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"

    # Business Rules
    DEFAULT_TIMEZONE: str = "Europe/Rome"

    def __init__(self):
        self.DB_DSN = os.getenv("DB_DSN", "")
        self.DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "5"))
        self.DB_ECHO = os.getenv("DB_ECHO", "false").lower() == "true"

        self.SECRET_KEY = os.getenv("SECRET_KEY", "")
        self.ACCESS_TOKEN_EXPIRE_SECONDS = int(os.getenv("JWT_ACCESS_TTL", "900"))
        self.REFRESH_TOKEN_EXPIRE_SECONDS = int(os.getenv("JWT_REFRESH_TTL", str(60 * 60 * 24 * 30)))

        self.S3_ENDPOINT = os.getenv("S3_ENDPOINT", "minio:9000")
        self.S3_PUBLIC_ENDPOINT = os.getenv("PUBLIC_S3_ENDPOINT")
        self.S3_ACCESS_KEY = os.getenv("S3_ACCESS_KEY", "minioadmin")
        self.S3_SECRET_KEY = os.getenv("S3_SECRET_KEY", "minioadminsecret")
        self.S3_BUCKET = os.getenv("S3_BUCKET", "tourbook")
        self.S3_REGION = os.getenv("S3_REGION")
        self.S3_SECURE = os.getenv("S3_SECURE", "false").lower() == "true"
        self.UPLOAD_MAX_BYTES = int(os.getenv("UPLOAD_MAX_BYTES", str(10 * 1024 * 1024)))

        self.RATE_LIMIT_DEFAULT = os.getenv("RATE_LIMIT_DEFAULT", "100/minute")
        self.RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"

        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

        self._validate()
        self._parse_cors_origins()

    def _validate(self):
        """Validate required settings"""
        if not self.SECRET_KEY:
            raise ValueError("SECRET_KEY environment variable must be set")
        if not self.DB_DSN:
            raise ValueError("DB_DSN environment variable must be set")

    def _parse_cors_origins(self):
        """Parse CORS origins from environment"""
        raw_origins = os.getenv("CORS_ALLOW_ORIGINS") or os.getenv("FRONTEND_URL", "*")

        if raw_origins.strip() == "*":
            self.CORS_ALLOW_ORIGINS = ["*"]
            self.CORS_ALLOW_CREDENTIALS = False  # wildcard forbids credentials
        else:
            self.CORS_ALLOW_ORIGINS = [o.strip() for o in raw_origins.split(",") if o.strip()]
            self.CORS_ALLOW_CREDENTIALS = True

    @property
    def is_sqlite(self) -> bool:
        return self.DB_DSN.startswith("sqlite")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()

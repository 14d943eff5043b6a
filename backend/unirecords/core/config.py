from pydantic_settings import BaseSettings
from typing import List, Any
import json


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "UniRecords"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    API_VERSION: str = "v1"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str = ""
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_RECYCLE: int = 1800

    # ==========================================
    # Cache (optional - empty URL disables it)
    # ==========================================
    REDIS_URL: str = ""
    CACHE_TTL_SECONDS: int = 300

    # ==========================================
    # Storage (S3 / MinIO)
    # ==========================================
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    AWS_REGION: str = "us-east-1"
    S3_BUCKET_NAME: str = "unirecords-documents"
    S3_ENDPOINT_URL: str = ""  # Set for MinIO, empty for AWS
    STORAGE_URL_EXPIRY: int = 3600  # 1 hour

    # ==========================================
    # Email
    # ==========================================
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    EMAIL_FROM: str = "noreply@unirecords.edu"
    EMAIL_FROM_NAME: str = "UniRecords"

    # SendGrid Configuration (preferred when a key is present)
    SENDGRID_API_KEY: str = ""
    USE_SENDGRID: bool = True

    # ==========================================
    # Authentication
    # ==========================================
    JWT_SECRET_KEY: str = ""
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    BCRYPT_ROUNDS: int = 12  # 4 for tests (fast), 12 for prod (secure)
    PASSWORD_RESET_EXPIRE_MINUTES: int = 60

    # ==========================================
    # Frontend URL (reset links, CORS)
    # ==========================================
    FRONTEND_URL: str = "http://localhost:3000"

    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    # ==========================================
    CORS_ORIGINS_STR: str = ""

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """CORS origins, falling back to the frontend URL"""
        origins = parse_cors_origins(self.CORS_ORIGINS_STR)
        return origins or [self.FRONTEND_URL]

    # ==========================================
    # Rate Limiting
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 100

    # ==========================================
    # Request limits
    # ==========================================
    MAX_REQUEST_SIZE: int = 57671680  # 55MB, 5 x 10MB uploads plus multipart framing
    BULK_CHUNK_SIZE: int = 50

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    # ==========================================
    # Seeding
    # ==========================================
    SEED_ADMIN_EMAIL: str = "admin@unirecords.edu"
    SEED_ADMIN_PASSWORD: str = ""

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def cache_enabled(self) -> bool:
        return bool(self.REDIS_URL)

    @property
    def email_configured(self) -> bool:
        if self.USE_SENDGRID and self.SENDGRID_API_KEY:
            return True
        return bool(self.SMTP_USER and self.SMTP_PASSWORD)


# Create settings instance
settings = Settings()

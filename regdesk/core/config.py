# regdesk/core/config.py

from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Values come from the process environment (Docker Compose passes the root .env).
    model_config = SettingsConfigDict(extra="ignore")

    # The environment mode: 'local' or 'prod'
    ENV: str = "local"

    # --- Production URLs (for inside Docker) ---
    DATABASE_URL_PROD: str = "postgresql+psycopg2://postgres:postgres@db:5432/regdesk"
    REDIS_URL_PROD: str = "redis://redis:6379/0"

    # --- Local Development URLs (for running locally) ---
    DATABASE_URL_LOCAL: str = "sqlite:///./regdesk.db"
    REDIS_URL_LOCAL: str = "redis://localhost:6379/0"

    # Secrets
    JWT_SECRET: str = "change-me-in-production"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 8 * 60
    # Derives the Fernet key used for PII columns
    PII_ENCRYPTION_SECRET: str = "change-me-pii-secret"
    # Keys the HMAC lookup hashes (email, identity)
    LOOKUP_HASH_SECRET: str = "change-me-lookup-secret"

    # --- Asset store ---
    ASSET_STORAGE_BACKEND: str = "local"  # 'local' or 's3'
    ASSET_STORAGE_DIR: str = "storage"
    AWS_S3_BUCKET_NAME: Optional[str] = None
    AWS_S3_REGION: Optional[str] = None
    AWS_S3_ENDPOINT_URL: Optional[str] = None
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[str] = None

    # --- QR badge assets ---
    QR_CONTENT_TEMPLATE: str = "{ticket_number}"
    QR_BOX_SIZE: int = 6
    QR_BORDER: int = 4
    QR_GENERATION_MAX_RETRIES: int = 5
    QR_RETRY_BACKOFF_MAX: int = 300

    # --- Policy ---
    # Maximum number of reprints per badge/ticket. None means unlimited.
    REPRINT_LIMIT: Optional[int] = None
    REGISTRATION_RATE_LIMIT: str = "10/minute"

    # --- Bootstrap data ---
    SUPERADMIN_NAME: str = "Super Admin"
    SUPERADMIN_EMAIL: str = "superadmin@dev.com"
    SUPERADMIN_PASSWORD: str = "change-me-superadmin"
    INITIAL_SERVER_MODE: str = "onsite"

    # --- Misc ---
    CORS_ORIGINS: Optional[str] = "http://localhost:3000"
    LOG_LEVEL: str = "INFO"
    CELERY_TASK_ALWAYS_EAGER: bool = False

    # --- Dynamic Properties ---
    # These return the correct URL based on ENV
    @property
    def DATABASE_URL(self) -> str:
        return (
            self.DATABASE_URL_LOCAL if self.ENV == "local" else self.DATABASE_URL_PROD
        )

    @property
    def REDIS_URL(self) -> str:
        return self.REDIS_URL_LOCAL if self.ENV == "local" else self.REDIS_URL_PROD

    def get_cors_origins(self) -> List[str]:
        """Parse CORS_ORIGINS from a comma-separated string."""
        if not self.CORS_ORIGINS:
            return []
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


# Create a single instance of the settings
settings = Settings()

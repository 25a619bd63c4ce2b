from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator, model_validator
from urllib.parse import quote_plus
from enum import Enum


class Environment(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    # Environment Configuration
    ENVIRONMENT: Environment = Environment.DEVELOPMENT

    # Project Information
    PROJECT_NAME: str = "DeltaOne Scorecard"
    VERSION: str = "0.1.0"
    API_V1_STR: str = "/api/v1"

    # Database - PostgreSQL when configured, local SQLite file otherwise
    POSTGRES_SERVER: Optional[str] = None
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: Optional[str] = None
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_DB: Optional[str] = None
    SQLALCHEMY_DATABASE_URI: Optional[str] = None
    SQLITE_FALLBACK_PATH: str = "./scorecard.db"

    # Scheduled-trigger boundary
    CRON_SECRET: Optional[str] = None

    # KPI value entry rules
    REQUIRE_NOTE_FOR_RED_KPI: bool = False

    # Redis (per-organization locks)
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    ORGANIZATION_LOCKS_ENABLED: bool = False
    ORGANIZATION_LOCK_TIMEOUT_SECONDS: int = 300
    ORGANIZATION_LOCK_BLOCKING_SECONDS: float = 10.0

    # Celery configuration
    CELERY_BROKER_URL: Optional[str] = None
    CELERY_RESULT_BACKEND: Optional[str] = None
    SCHEDULED_IMPORT_SCAN_INTERVAL_SECONDS: int = 900

    # Observability
    METRICS_ENABLED: bool = True
    LOG_LEVEL: str = "INFO"

    @field_validator("CRON_SECRET", mode="before")
    @classmethod
    def blank_secret_is_unset(cls, v: Optional[str]) -> Optional[str]:
        if isinstance(v, str) and v.strip() == "":
            return None
        return v

    @model_validator(mode="after")
    def _derive_database_uri(self) -> "Settings":
        if not self.SQLALCHEMY_DATABASE_URI:
            if self.POSTGRES_SERVER and self.POSTGRES_USER and self.POSTGRES_DB:
                safe_user = quote_plus(self.POSTGRES_USER)
                if self.POSTGRES_PASSWORD:
                    safe_password = quote_plus(self.POSTGRES_PASSWORD)
                    self.SQLALCHEMY_DATABASE_URI = (
                        f"postgresql://{safe_user}:{safe_password}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
                    )
                else:
                    self.SQLALCHEMY_DATABASE_URI = (
                        f"postgresql://{safe_user}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
                    )
            else:
                self.SQLALCHEMY_DATABASE_URI = f"sqlite:///{self.SQLITE_FALLBACK_PATH}"
        return self

    @model_validator(mode="after")
    def validate_environment_config(self):
        """Validate environment-specific configuration requirements"""
        if self.is_production:
            if not self.CRON_SECRET:
                raise ValueError("CRON_SECRET must be set in production")
            if self.SQLALCHEMY_DATABASE_URI.startswith("sqlite"):
                raise ValueError("Production must not run on the SQLite fallback database")
        return self

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == Environment.PRODUCTION

    @property
    def is_sqlite(self) -> bool:
        return self.SQLALCHEMY_DATABASE_URI.startswith("sqlite")

    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env", extra="ignore")


settings = Settings()

# student_ncr/core/config.py - Centralized settings management using Pydantic
from pydantic import Field, validator
from pydantic_settings import BaseSettings
from typing import List
import logging

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

LOG_FORMATS = {
    "simple": "%(levelname)s - %(message)s",
    "detailed": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}


class Settings(BaseSettings):
    """Application settings with validation and type safety"""

    # Application Environment
    ENV: str = Field(default="dev", description="Environment: dev, staging, prod")
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=8000, ge=1, le=65535, description="API port")
    API_TITLE: str = Field(default="Student NCR Classification API", description="API title")
    API_VERSION: str = Field(default="1.0.0", description="API version")

    # Database Configuration
    DATABASE_URL: str = Field(..., description="Database connection URL")
    DATABASE_ECHO: bool = Field(default=False, description="Echo SQL queries")
    DATABASE_POOL_SIZE: int = Field(default=5, ge=1, le=100, description="Connection pool size")
    DATABASE_MAX_OVERFLOW: int = Field(default=10, ge=0, le=100, description="Max overflow connections")
    DATABASE_POOL_TIMEOUT: int = Field(default=30, ge=1, le=300, description="Pool timeout in seconds")
    DATABASE_POOL_RECYCLE: int = Field(default=3600, ge=300, description="Pool recycle time in seconds")
    SLOW_QUERY_THRESHOLD_SECONDS: float = Field(default=0.1, gt=0, description="Slow query warning threshold (dev only)")

    # CORS Configuration
    CORS_ORIGINS: List[str] = Field(default=DEFAULT_CORS_ORIGINS, description="CORS allowed origins")

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: str = Field(default="detailed", description="Log format: simple, detailed")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"  # Ignore extra environment variables

    @validator("ENV")
    def validate_environment(cls, v):
        allowed_envs = ["dev", "development", "staging", "prod", "production"]
        if v.lower() not in allowed_envs:
            raise ValueError(f"ENV must be one of: {allowed_envs}")
        return v.lower()

    @validator("DATABASE_URL")
    def validate_database_url(cls, v):
        allowed_prefixes = (
            "postgresql://",
            "postgresql+psycopg2://",
            "postgresql+psycopg://",
            "sqlite:///",
        )
        if not v.startswith(allowed_prefixes):
            raise ValueError("DATABASE_URL must be a valid database connection string (postgresql, postgresql+psycopg, postgresql+psycopg2, or sqlite)")
        return v

    @validator("LOG_LEVEL")
    def validate_log_level(cls, v):
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed_levels:
            raise ValueError(f"LOG_LEVEL must be one of: {allowed_levels}")
        return v.upper()

    @validator("LOG_FORMAT")
    def validate_log_format(cls, v):
        if v.lower() not in LOG_FORMATS:
            raise ValueError(f"LOG_FORMAT must be one of: {list(LOG_FORMATS)}")
        return v.lower()

    @validator("CORS_ORIGINS", pre=True)
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            # Handle comma-separated string
            if v.strip():
                return [origin.strip() for origin in v.split(",") if origin.strip()]
            return list(DEFAULT_CORS_ORIGINS)
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.ENV in ["dev", "development"]

    @property
    def is_production(self) -> bool:
        """Check if running in production mode"""
        return self.ENV in ["prod", "production"]

    @property
    def database_location(self) -> str:
        """Database URL without credentials, safe to log"""
        return self.DATABASE_URL.split("@")[-1] if "@" in self.DATABASE_URL else "local"


# Create settings instance with validation
try:
    settings = Settings()
except Exception as e:
    print(f"Configuration error: {e}")
    print("Please check your .env file and environment variables")
    raise


def configure_logging():
    """Configure root logging from LOG_LEVEL and LOG_FORMAT"""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format=LOG_FORMATS[settings.LOG_FORMAT],
    )


# Export settings
__all__ = ["settings", "Settings", "configure_logging"]

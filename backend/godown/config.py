"""
Configuration settings for the Godown inventory API.

Loads environment variables from .env file and provides typed configuration.
"""

from typing import List
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    CORS_ORIGINS: List[str] = Field(
        default=["http://localhost:5173", "http://localhost:3000", "http://localhost:8080"],
        description="Allowed CORS origins",
    )

    # Security Configuration
    SECRET_KEY: str = Field(
        default="5b1e0c9b7a3f4e6d8c2a1f0e9d8c7b6a5f4e3d2c1b0a9f8e7d6c5b4a3f2e1d0c",
        description="Secret key for JWT",
    )
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(
        default=60 * 24, description="Access token expiration time in minutes"
    )
    BCRYPT_ROUNDS: int = Field(default=12, description="bcrypt cost factor")
    LOGIN_RATE_LIMIT: str = Field(
        default="5/minute", description="slowapi limit applied to login endpoints"
    )
    RATE_LIMIT_ENABLED: bool = Field(default=True, description="Enable slowapi limits")

    # Database Configuration
    DATABASE_URL: str = Field(
        default="sqlite:///./data/godowns.db", description="SQLite database URL"
    )
    DATABASE_ECHO: bool = Field(
        default=False, description="Echo SQL queries (for debugging)"
    )

    # Hierarchy / listing
    MAX_TREE_DEPTH: int = Field(
        default=32, ge=1, description="Deepest location level returned by tree queries"
    )
    DEFAULT_PAGE_SIZE: int = Field(default=20, ge=1, description="Default item page size")
    MAX_PAGE_SIZE: int = Field(default=200, ge=1, description="Largest accepted item page size")

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    ENABLE_FILE_LOGGING: bool = Field(
        default=False, description="Enable logging to file"
    )
    LOG_DIR: str = Field(default="./logs", description="Directory for log files")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()

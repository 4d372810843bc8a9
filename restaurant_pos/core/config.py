"""
Application configuration using Pydantic Settings
"""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "Restaurant POS"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # API
    API_V1_PREFIX: str = "/api/v1"
    ALLOWED_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:3001",
    ]

    # Database
    DATABASE_URL: str = "sqlite:///./restaurant_pos.db"

    # JWT
    JWT_SECRET_KEY: str = "jwt-secret-key-change-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12  # one service day

    # Orders
    ORDER_NUMBER_START: int = 10001
    ADDITIONAL_ITEMS_SUFFIX: str = "-ADD"

    # Stations
    KITCHEN_DEFAULT_PREP_MINUTES: int = 15
    BAR_DEFAULT_PREP_MINUTES: int = 5
    COMPLETED_LOOKBACK_HOURS: int = 24
    TICKET_RETENTION_HOURS: int = 24
    TICKET_PURGE_STATIONS: list[str] = ["kitchen"]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()

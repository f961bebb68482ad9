from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    # === App Metadata ===
    PROJECT_NAME: str = "InterviewPrep Scheduler"
    ENVIRONMENT: str = "dev"  # dev, staging, prod
    DEBUG_MODE: bool = False
    API_VERSION: str = "v1"

    # === Security ===
    API_KEY: str = "super-secret-key"
    ENABLE_API_KEY_SECURITY: bool = True
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",  # Local React dev
        "http://localhost:8080",  # Vite dev server
    ]

    # === Logging ===
    LOG_LEVEL: str = "INFO"
    ENABLE_JSON_LOGS: bool = False

    @property
    def LOG_LEVEL_NUMERIC(self) -> int:
        import logging
        return getattr(logging, self.LOG_LEVEL.upper(), logging.INFO)

    # === Database (PostgreSQL or SQLite fallback) ===
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "postgres"
    DB_NAME: str = "interview_scheduler"

    @property
    def DATABASE_URL(self) -> str:
        if self.DB_HOST == "sqlite":
            return "sqlite:///./scheduler.db"
        return f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    # === Scheduling Rules ===
    BOOKING_BUFFER_MINUTES: int = 30
    SLOT_TIME_LABELS: List[str] = [
        "09:00 AM",
        "10:00 AM",
        "11:00 AM",
        "12:00 PM",
        "02:00 PM",
        "03:00 PM",
        "04:00 PM",
        "05:00 PM",
    ]
    ALLOWED_DURATIONS: List[int] = [30, 45, 60, 90]
    MEETING_LINK_BASE: str = "https://zoom.us/j/"

    # === Feature Flags ===
    ENABLE_NOTIFICATIONS: bool = True
    ENABLE_PROMETHEUS: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> AppConfig:
    return AppConfig()


# Global config instance
settings = get_settings()

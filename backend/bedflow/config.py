"""
Centralised application configuration.
Every tunable lives here so it can be overridden from the environment or .env.
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Main system settings."""

    # ============================================
    # APPLICATION
    # ============================================
    APP_TITLE: str = "Hospital Bed Coordinator"
    APP_DESCRIPTION: str = "Bed allocation and emergency queue coordination"
    APP_VERSION: str = "1.0.0"
    APP_ENV: str = "development"
    DEBUG: bool = False

    # ============================================
    # DATABASE
    # ============================================
    DATABASE_URL: str = "sqlite:///./hospital_beds.db"

    # ============================================
    # CORS
    # ============================================
    CORS_ORIGINS: List[str] = ["*"]
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: List[str] = ["GET", "POST", "PATCH", "DELETE"]
    CORS_ALLOW_HEADERS: List[str] = ["*"]

    # ============================================
    # FACILITY
    # ============================================
    SEED_BEDS_ON_STARTUP: bool = True
    SEED_DISTANCE_MAX: int = 10  # seeded beds get 1..10
    BED_DISTANCE_MIN: int = 1
    BED_DISTANCE_MAX: int = 100  # beds added at runtime get 1..100

    # ============================================
    # QUEUE
    # ============================================
    PATIENT_ID_SPACE: int = 10000  # P-0 .. P-9999
    DEFAULT_CONDITION: str = "Stable"

    # ============================================
    # LOGGING
    # ============================================
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()

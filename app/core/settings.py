"""
Core settings and environment variables for Waste Complaint Hub.
Uses pydantic-settings for type-safe environment variable loading.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Create a .env file in the root directory to configure these.
    """

    # Application
    APP_NAME: str = "Waste Complaint Hub"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS - Frontend URLs allowed to access this API
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Firebase/Firestore
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None  # Path to service account JSON

    # In-memory stores for local development without Firebase credentials
    USE_MOCK_DB: bool = False
    SEED_PATH: str = "./db_seed.json"  # Users and teams preloaded into the in-memory stores

    # Caller identity (tokens are issued elsewhere, we only decode them)
    JWT_SECRET: str = "dev-secret-change"
    JWT_ALGORITHM: str = "HS256"

    # Complaint lifecycle
    ECO_POINTS_REWARD: int = 10  # Credited to the reporter on every new complaint
    COMPLAINT_PAGE_SIZE: int = 200
    DEFAULT_CATEGORY: str = "Garbage Collection"
    DEFAULT_PRIORITY: str = "Medium"

    # Real-time notifications
    NOTIFICATION_QUEUE_SIZE: int = 100  # Per-connection buffer, overflow is dropped

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"

    @property
    def cors_origins(self) -> list:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


# Global settings instance
settings = Settings()

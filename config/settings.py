"""Settings configuration using pydantic-settings for environment variable management."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from dotenv import load_dotenv

load_dotenv(override=True)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    MONGODB_URL: str = "mongodb://localhost:27017"
    DATABASE_NAME: str = "notifydo"

    JWT_SECRET: str = "your-secret-key-change-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 43200

    PASSWORD_MIN_LENGTH: int = 6

    CORS_ORIGINS: str = "*"

    API_URL: str = "http://localhost:8000/api"
    CLIENT_STORAGE_PATH: Path = Path.home() / ".notifydo" / "storage.json"
    CLIENT_TOKEN_KEY: str = "userToken"

    APP_NAME: str = "NotifyDo"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    @field_validator("CORS_ORIGINS", "API_URL", mode="before")
    @classmethod
    def strip_whitespace(cls, v):
        """Trim surrounding whitespace from string settings."""
        if isinstance(v, str):
            return v.strip()
        return v

    def get_cors_origins(self) -> list[str]:
        """
        Parse comma-separated CORS origins into a list.

        Returns:
            List of allowed origins (e.g., ['http://localhost:5173', 'https://notifydo.app'])
        """
        if not self.CORS_ORIGINS:
            return []
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()

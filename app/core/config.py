"""
Centralized application configuration implementing the 12-Factor App methodology.
Values are read from environment variables or an optional .env file.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Immutable configuration schema backed by environment variables."""

    APP_NAME: str = "Loan Amortization API"
    VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Any SQLAlchemy URL works; PostgreSQL in production, SQLite locally
    DATABASE_URL: str = "sqlite:///./loans.db"

    SECRET_KEY: str = "your-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    # One day
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)


settings = Settings()

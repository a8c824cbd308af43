"""Application configuration from environment."""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings loaded from env / .env."""

    app_name: str = "Teacher Training Simulator"
    debug: bool = False
    log_level: str = "INFO"

    # Database (async driver; Alembic converts it to a sync url)
    database_url: str = "sqlite+aiosqlite:///./teachsim.db"

    # Session cookie signing
    secret_key: str = "change-me-in-production-use-env"

    # Auth cookie (session-based for logged-in users)
    auth_cookie_name: str = "tts_auth"
    auth_cookie_max_age: int = 60 * 60 * 24 * 14  # 14 days

    # Default page size for session history
    session_history_limit: int = 10

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


def get_settings() -> Settings:
    return Settings()

"""
Application configuration from environment variables.
Loads .env from the backend directory so secrets are found regardless of cwd.
"""
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# .env next to backend/ (parent of proximos/); loaded explicitly so values are set even when run from repo root
_BACKEND_DIR = Path(__file__).resolve().parent.parent
_ENV_FILE = _BACKEND_DIR / ".env"

if _ENV_FILE.exists():
    from dotenv import load_dotenv
    load_dotenv(_ENV_FILE, override=False)
else:
    # Fallback: try backend/.env relative to cwd (e.g. when running from repo root)
    import os
    _cwd_env = Path(os.getcwd()) / "backend" / ".env"
    if _cwd_env.exists():
        from dotenv import load_dotenv
        load_dotenv(_cwd_env, override=False)

DEFAULT_SECRET_KEY = "change-me-in-production"


class Settings(BaseSettings):
    """Load and validate config from env."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database: sqlite for local runs and tests, postgresql for production
    database_url: str = "sqlite:///./proximos_dev.db"

    # Environment: set ENV=production in production; used to enforce SECRET_KEY.
    env: str = ""

    # JWT signed with SECRET_KEY; carried in the auth cookie or a Bearer header.
    secret_key: str = DEFAULT_SECRET_KEY
    jwt_algorithm: str = "HS256"
    jwt_expire_hours: int = 24
    auth_cookie_name: str = "token"
    auth_cookie_secure: bool = False

    # Pagination: page_size outside 1..max_page_size falls back to default_page_size
    default_page_size: int = 20
    max_page_size: int = 100

    # CORS: comma-separated origins
    cors_origins: str = "http://localhost:3000"

    debug: bool = False

    @field_validator("jwt_algorithm", mode="before")
    @classmethod
    def _normalize_algorithm(cls, v: str) -> str:
        return (v or "HS256").strip().upper() if isinstance(v, str) else "HS256"

    @property
    def is_production(self) -> bool:
        return (self.env or "").strip().lower() == "production"


settings = Settings()

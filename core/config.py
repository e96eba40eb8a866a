# core/config.py
import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


def _env_list(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


@dataclass
class Settings:
    # Service
    app_name: str = os.getenv("APP_NAME", "Library Management System")
    api_host: str = os.getenv("API_HOST", "127.0.0.1")
    api_port: int = int(os.getenv("API_PORT", "3000"))
    debug: bool = _env_bool("DEBUG", "False")
    cors_origins: List[str] = field(default_factory=lambda: _env_list("CORS_ORIGINS", "*"))

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///library.db")
    database_pool_size: int = int(os.getenv("DATABASE_POOL_SIZE", "5"))
    database_max_overflow: int = int(os.getenv("DATABASE_MAX_OVERFLOW", "10"))

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Circulation
    loan_period_days: int = int(os.getenv("LOAN_PERIOD_DAYS", "14"))

    # Pagination
    default_page_size: int = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
    max_page_size: int = int(os.getenv("MAX_PAGE_SIZE", "100"))

    # Book endpoint protection
    rate_limit_max: int = int(os.getenv("RATE_LIMIT_MAX", "10"))
    rate_limit_window_seconds: float = float(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "900"))
    basic_auth_username: str = os.getenv("BASIC_AUTH_USERNAME", "admin")
    basic_auth_password: str = os.getenv("BASIC_AUTH_PASSWORD", "admin")


settings = Settings()

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List


def _getenv_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return default if value is None or value == "" else value


def _getenv_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return int(value)


def _getenv_list(name: str, default: List[str]) -> List[str]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///./foodlink.db"
    secret_key: str = "your-secret-key-here"  # Change this in production
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    submission_rate_limit: int = 30
    submission_rate_window_seconds: int = 900
    log_level: str = "INFO"


def load_settings() -> Settings:
    defaults = Settings()
    return Settings(
        database_url=_getenv_str("DATABASE_URL", defaults.database_url),
        secret_key=_getenv_str("SECRET_KEY", defaults.secret_key),
        algorithm=_getenv_str("ALGORITHM", defaults.algorithm),
        access_token_expire_minutes=_getenv_int(
            "ACCESS_TOKEN_EXPIRE_MINUTES", defaults.access_token_expire_minutes
        ),
        cors_origins=_getenv_list("CORS_ORIGINS", defaults.cors_origins),
        submission_rate_limit=_getenv_int("SUBMISSION_RATE_LIMIT", defaults.submission_rate_limit),
        submission_rate_window_seconds=_getenv_int(
            "SUBMISSION_RATE_WINDOW_SECONDS", defaults.submission_rate_window_seconds
        ),
        log_level=_getenv_str("LOG_LEVEL", defaults.log_level).upper(),
    )


@lru_cache()
def get_settings() -> Settings:
    return load_settings()

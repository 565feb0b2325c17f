import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


@dataclass(frozen=True)
class Settings:
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-3.5-turbo"
    openai_base_url: Optional[str] = None
    max_suggestion_attempts: int = 10

    omdb_api_key: Optional[str] = None

    twilio_account_sid: Optional[str] = None
    twilio_auth_token: Optional[str] = None
    twilio_phone_number: Optional[str] = None

    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_pass: Optional[str] = None

    data_dir: str = "."
    database_url: Optional[str] = None
    database_name: Optional[str] = None

    movie_api_url: str = "http://localhost:8000"
    http_timeout: int = 30
    rate_limit_per_minute: int = 120

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            openai_model=os.getenv("OPENAI_MODEL", cls.openai_model),
            openai_base_url=os.getenv("OPENAI_BASE_URL") or None,
            max_suggestion_attempts=_int_env("MAX_SUGGESTION_ATTEMPTS", cls.max_suggestion_attempts),
            omdb_api_key=os.getenv("OMDB_API_KEY"),
            twilio_account_sid=os.getenv("TWILIO_ACCOUNT_SID"),
            twilio_auth_token=os.getenv("TWILIO_AUTH_TOKEN"),
            twilio_phone_number=os.getenv("TWILIO_PHONE_NUMBER"),
            smtp_host=os.getenv("SMTP_HOST"),
            smtp_port=_int_env("SMTP_PORT", cls.smtp_port),
            smtp_user=os.getenv("SMTP_USER"),
            smtp_pass=os.getenv("SMTP_PASS"),
            data_dir=os.getenv("DATA_DIR", cls.data_dir),
            database_url=os.getenv("DATABASE_URL"),
            database_name=os.getenv("DATABASE_NAME"),
            movie_api_url=os.getenv("MOVIE_API_URL", cls.movie_api_url).rstrip("/"),
            http_timeout=_int_env("HTTP_TIMEOUT", cls.http_timeout),
            rate_limit_per_minute=_int_env("RATE_LIMIT_PER_MINUTE", cls.rate_limit_per_minute),
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings.from_env()

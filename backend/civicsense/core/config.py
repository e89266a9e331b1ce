from functools import lru_cache
import json
from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


BACKEND_ENV_FILE = Path(__file__).resolve().parents[2] / ".env"


class Settings(BaseSettings):
    # Resolve to backend/.env so `uvicorn --app-dir backend` works from any cwd.
    model_config = SettingsConfigDict(env_file=str(BACKEND_ENV_FILE), env_file_encoding="utf-8")

    project_name: str = "CivicSense Schedule API"
    api_prefix: str = "/api"

    database_url: str = "sqlite+pysqlite:///./civicsense.db"

    work_start_hour: int = 9
    work_end_hour: int = 18
    upcoming_window_days: int = 7

    log_level: str = "INFO"

    max_request_size_bytes: int = 2_000_000
    security_enable_hsts: bool = False
    security_hsts_max_age_seconds: int = 31536000

    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:3002",
        "http://localhost:8080",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
    ]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_cors_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            stripped = value.strip()
            if stripped.startswith("["):
                try:
                    parsed = json.loads(stripped)
                    if isinstance(parsed, list):
                        return [str(item).strip() for item in parsed if str(item).strip()]
                except json.JSONDecodeError:
                    pass
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @model_validator(mode="after")
    def validate_working_hours(self) -> "Settings":
        if not 0 <= self.work_start_hour < self.work_end_hour <= 24:
            raise ValueError("work_start_hour and work_end_hour must satisfy 0 <= start < end <= 24")
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()

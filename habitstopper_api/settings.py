from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = Field("sqlite+aiosqlite:///./habitstopper.db", alias="DATABASE_URL")
    backend_session_secret: str = Field(..., alias="BACKEND_SESSION_SECRET")

    google_client_id: str | None = Field(None, alias="GOOGLE_CLIENT_ID")
    google_client_secret: str | None = Field(None, alias="GOOGLE_CLIENT_SECRET")
    google_redirect_uri: str = Field(
        "http://localhost:8000/auth/google/callback", alias="GOOGLE_REDIRECT_URI"
    )

    client_origin: str = Field("http://localhost:8501", alias="CLIENT_ORIGIN")
    session_max_age_days: int = Field(30, alias="SESSION_MAX_AGE_DAYS")
    log_level: str = Field("INFO", alias="BACKEND_LOG_LEVEL")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    @property
    def google_oauth_configured(self) -> bool:
        return bool(self.google_client_id and self.google_client_secret)

    @property
    def session_max_age_seconds(self) -> int:
        return int(self.session_max_age_days) * 24 * 60 * 60


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()

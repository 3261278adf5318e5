import secrets
from typing import Literal

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "ForexVolcano"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    DEBUG: bool = False

    SECRET_KEY: str = secrets.token_urlsafe(32)
    # 60 minutes * 24 hours * 8 days = 8 days
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 8

    STORE_BACKEND: Literal["memory", "sql"] = "memory"
    SQLALCHEMY_DATABASE_URI: str = "sqlite:///./forexvolcano.db"
    WATCH_POLL_INTERVAL: float = 1.0

    SUGGESTION_BATCH_SIZE: int = 20
    SUGGESTION_LIMIT: int = 5

    MEDIA_ROOT: str = "media"
    MEDIA_BASE_URL: str = "http://localhost:8000/media"

    LOG_DIR: str = "logs"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_local(self) -> bool:
        return self.ENVIRONMENT == "local"


settings = Settings()  # type: ignore

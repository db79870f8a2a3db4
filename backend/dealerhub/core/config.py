"""Application settings loaded from the environment."""

from typing import Optional

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings for the dealerhub backend.

    Values come from environment variables (or a local `.env` file). Every
    attribute can be overridden per deployment.
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    PROJECT_NAME: str = "dealerhub"
    API_V1_STR: str = "/api/v1"
    LOCAL_DEVELOPMENT: bool = False
    LOG_LEVEL: str = "INFO"

    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "dealerhub"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "dealerhub"

    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_PASSWORD: Optional[str] = None
    REDIS_DB: int = 0

    # Feature flag cache (one entry per organization)
    FEATURE_FLAG_CACHE_ENABLED: bool = True
    FEATURE_FLAG_CACHE_TTL: int = 300

    # Sessions
    SESSION_TTL: int = 86400
    SESSION_COOKIE_NAME: str = "dealerhub_session"

    @computed_field  # type: ignore[misc]
    @property
    def SQLALCHEMY_ASYNC_DATABASE_URI(self) -> str:
        """Async SQLAlchemy URI built from the POSTGRES_* settings."""
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )


settings = Settings()

"""Application configuration via Pydantic settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration object loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Clinic API"
    debug: bool = False
    environment: str = Field("development", alias="ENVIRONMENT")

    database_url: str = Field(..., alias="DATABASE_URL")

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    default_page_limit: int = Field(10, alias="DEFAULT_PAGE_LIMIT")
    max_page_limit: int = Field(100, alias="MAX_PAGE_LIMIT")
    max_page: int = Field(100_000, alias="MAX_PAGE")

    default_examination_fee: int = Field(30000, alias="DEFAULT_EXAMINATION_FEE")

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


@lru_cache(1)
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()


settings = get_settings()

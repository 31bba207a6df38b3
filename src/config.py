"""Configuration settings for the oncology trial finder API."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Get the directory where this config file is located
CONFIG_DIR = Path(__file__).parent


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=str(CONFIG_DIR / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    SERVICE_NAME: str = "Oncology Trial Finder"
    VERSION: str = "1.0.0"
    DEBUG: bool = True
    HOST: str = "127.0.0.1"
    PORT: int = 3001

    LOG_LEVEL: str = "INFO"

    # CORS Configuration
    CORS_ALLOW_ORIGINS: str = "*"

    # ClinicalTrials.gov registry
    REGISTRY_BASE_URL: str = "https://clinicaltrials.gov/api/v2/studies"
    REGISTRY_TIMEOUT: float = 30.0
    REGISTRY_PAGE_SIZE: int = 100
    REGISTRY_MAX_PAGES: int = 20

    # Eligibility assessment
    ASSESSMENT_CANDIDATE_LIMIT: int = 100
    ASSESSMENT_TTL_SECONDS: int = 3600
    ASSESSMENT_MAX_ENTRIES: int = 1000

    # Client default (used by src.client.api_client)
    API_BASE_URL: str = "http://127.0.0.1:3001/api"
    API_TIMEOUT: float = 15.0


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    try:
        return Settings()  # type: ignore[call-arg]
    except Exception as e:
        raise RuntimeError(f"Failed to load settings: {e}") from e


settings = get_settings()

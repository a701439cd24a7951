"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="CRM_", extra="ignore"
    )

    # Service
    service_name: str = "crm-insights"
    log_level: str = "INFO"

    # Insights
    recommendation_confidence: float = 0.7

    # HTTP
    max_batch_size: int = 100


settings = Settings()

"""Configuration management for careerboard."""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application Configuration
    debug: bool = Field(False, description="Enable debug mode")
    log_level: str = Field("INFO", description="Logging level")

    # Lifecycle Configuration
    follow_up_threshold_days: int = Field(14, ge=1, description="Days of inactivity before an application needs follow-up")

    # Recommendation Configuration
    recommendation_limit: int = Field(20, ge=1, description="Maximum recommended jobs fetched per request")
    recommendation_target: int = Field(10, ge=1, description="Recommended list is topped up with latest jobs to this size")
    dashboard_recommendation_limit: int = Field(6, ge=1, description="Recommended jobs shown on the dashboard")

    # Listing Configuration
    jobs_page_size: int = Field(12, ge=1, description="Jobs per page")
    applications_page_size: int = Field(10, ge=1, description="Applications per page")
    related_jobs_limit: int = Field(4, ge=0, description="Related jobs shown with a job")
    top_categories_limit: int = Field(8, ge=1, description="Categories reported in platform statistics")

    # Server Configuration
    api_host: str = Field("0.0.0.0", description="API server host")
    api_port: int = Field(8000, description="API server port")
    reload: bool = Field(False, description="Enable auto-reload")
    allowed_origins: list[str] = Field(["*"], description="CORS allowed origins")
    allowed_hosts: Optional[list[str]] = Field(None, description="Trusted hosts")

    # Security
    user_id_header: str = Field("X-User-Id", description="Header carrying the resolved user id")


# Global settings instance
settings = Settings()

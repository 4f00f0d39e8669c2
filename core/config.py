"""
Configuration management for Leadlens.
Engagement scoring service settings.
"""

from typing import Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


ENGAGEMENT_STORES = ("memory", "database")


class Config(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # API Configuration
    api_key: str = Field(default="dev_api_key")

    # Database
    database_url: Optional[str] = Field(
        default=None,
        description="PostgreSQL database URL (if not provided, will be built from parts below)"
    )
    database_host: str = Field(default="localhost", description="Database host")
    database_port: int = Field(default=5432, description="Database port")
    database_name: str = Field(default="leadlens", description="Database name")
    database_user: str = Field(default="leadlens", description="Database user")
    database_password: str = Field(default="leadlens", description="Database password")

    @property
    def database_url_from_parts(self) -> str:
        """Build database URL from parts."""
        return f"postgresql://{self.database_user}:{self.database_password}@{self.database_host}:{self.database_port}/{self.database_name}"

    # Engagement engine
    engagement_store: str = Field(
        default="memory",
        description="Profile store backend: 'memory' or 'database'"
    )
    max_event_future_skew_seconds: int = Field(
        default=300,
        description="Events stamped further than this into the future are rejected"
    )

    # Application Settings
    log_level: str = Field(default="INFO")
    log_file: Optional[str] = Field(default="logs/app.log")
    environment: str = Field(default="development")

    # Redis Configuration (Optional - for rate limiting)
    redis_host: Optional[str] = Field(
        default=None,
        description="Redis host for rate limit storage (in-memory storage when unset)"
    )
    redis_port: int = Field(default=6379, description="Redis port")
    redis_db: int = Field(default=0, description="Redis database number")
    redis_password: Optional[str] = Field(default=None, description="Redis password (optional)")

    read_rate_limit: str = Field(
        default="120/minute",
        description="Rate limit for dashboard read and gate endpoints"
    )

    # Event emitter (client side)
    collector_url: str = Field(
        default="http://localhost:8000/api/v1/events",
        description="Endpoint the event emitter posts to"
    )
    client_timeout_seconds: float = Field(default=5.0)
    time_report_interval_seconds: float = Field(
        default=10.0,
        description="Seconds between cumulative results-page time reports"
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment.lower() == "production"

    @model_validator(mode='after')
    def validate_engagement_store(self):
        """Validate that the profile store backend is known."""
        self.engagement_store = self.engagement_store.strip().lower()
        if self.engagement_store not in ENGAGEMENT_STORES:
            raise ValueError(
                f"ENGAGEMENT_STORE must be one of: {', '.join(ENGAGEMENT_STORES)}"
            )
        return self


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create global config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Drop the cached config so the next call re-reads the environment."""
    global _config
    _config = None

"""Application settings loaded from the environment."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the MCP server and HTTP API.

    Every field can be overridden with an ``AFFAIRS_``-prefixed environment
    variable (e.g. ``AFFAIRS_LOG_LEVEL=DEBUG``) or a ``.env`` file.
    """

    model_config = SettingsConfigDict(env_prefix="AFFAIRS_", env_file=".env", extra="ignore")

    service_name: str = "Business Affairs Workflow Assistant"
    server_name: str = "business-affairs-mcp"
    version: str = "1.0.0"
    environment: str = "development"
    log_level: str = "INFO"

    # Context store
    activity_log_limit: int = 100
    default_days_ahead: int = 30
    dashboard_days_ahead: int = 7
    followup_days_ahead: int = 7

    # Dispatcher
    handler_timeout_seconds: float = 30.0

    # HTTP API, served next to the stdio server when enabled
    http_enabled: bool = False
    http_host: str = "127.0.0.1"
    http_port: int = 8000
    cors_origins: list[str] = ["*"]


@lru_cache()
def get_settings() -> Settings:
    """Get the cached settings instance."""
    return Settings()

"""
Executor configuration definition.

Loads configuration from environment variables and provides a Pydantic model.
Uses pydantic-settings for type safety and defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExecutorConfig(BaseSettings):
    """
    Settings shared by the executor, its HTTP client and the rate limiter.

    There is no module-level instance: build one and pass it to whatever needs it.
    """

    LOG_LEVEL: str = Field(default="INFO", description="Log level")
    LOG_CONFIG_PATH: str = Field(default="", description="Path to a logging YAML file")
    VERIFY_SSL: bool = Field(default=True, description="Whether to verify SSL certificates")

    # API endpoint
    BASE_URL: str = Field(default="https://api.vk.com/method/", description="API base URL")
    API_VERSION: str = Field(default="5.141", description="Default 'v' request parameter")
    API_LANG: str = Field(default="ru", description="Default 'lang' request parameter")

    # Execution
    MAX_REQUEST_TRIES: int = Field(
        default=50, ge=0, description="Max transport sends per call scope (renews included)"
    )
    REQUEST_TIMEOUT: float = Field(default=30.0, description="HTTP timeout (seconds)")
    HTTP_MAX_CONNECTIONS: int = Field(default=100, description="Connection pool size")
    HTTP_MAX_KEEPALIVE: int = Field(default=20, description="Keep-alive connections")

    # Per-credential rate limiting
    LIMITER_RPS: float = Field(default=3.0, gt=0, description="Requests per second per token")
    LIMITER_EXPIRATION: float = Field(
        default=600.0, gt=0, description="Idle lifetime of a token limiter (seconds)"
    )
    LIMITER_CLEANUP_INTERVAL: float = Field(
        default=3600.0, gt=0, description="Expired limiter sweep interval (seconds)"
    )
    LIMITER_CACHE_SIZE: int = Field(
        default=100_000, gt=0, description="Max number of cached token limiters"
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

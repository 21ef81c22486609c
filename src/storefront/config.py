"""Storefront configuration.

Values come from ``STOREFRONT_*`` environment variables or a local ``.env``
file. ``STOREFRONT_ENV`` selects the environment ("development", "test",
"staging", "production") and drives the default log level.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorefrontSettings(BaseSettings):
    env: str = "development"

    # Order backend: "fake" (in-process) or "http" (POST {api_url}/orders)
    order_backend: str = "fake"
    api_url: str = "http://localhost:5000/api"

    default_payment_method: str = "Cash on delivery"
    confirmation_delay: float = Field(default=2.0, ge=0)
    submission_timeout: float = Field(default=30.0, gt=0)

    login_path: str = "/login"
    order_history_path: str = "/profile"

    # When set, the cart survives restarts in this JSON file
    cart_storage_path: str | None = None

    # Set up stdlib + structlog handlers when a session starts
    configure_logs: bool = True
    log_dir: str | None = None

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_",
        env_file=".env",
        extra="ignore",
    )


@lru_cache
def get_settings() -> StorefrontSettings:
    """Return the process-wide settings instance."""
    return StorefrontSettings()

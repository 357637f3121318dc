"""
Configuration Management for pyWWCP

All settings are read from environment variables (or a local .env file) when
the module is imported; explicit keyword arguments override them.

Environment Variables:

    Status Histories:
        WWCP_HISTORY_MAX_DEPTH     - Entries kept per entity and axis (default: 50)
        WWCP_DEFAULT_HISTORY_SIZE  - historySize when a request gives none (default: 1)

    Mutation:
        WWCP_LOCK_TIMEOUT          - Seconds to wait for a history lock (default: 2.0)
        WWCP_MUTATION_RETRIES      - Local retries on conflicting appends (default: 3)

    Upstream Notification:
        WWCP_SEND_UPSTREAM         - Notify upstream on status changes "yes"/"no" (default: "yes")
        WWCP_UPSTREAM_URL          - URL receiving status change events as JSON POST (default: none)
        WWCP_UPSTREAM_TIMEOUT      - HTTP timeout in seconds (default: 5.0)

    Logging:
        WWCP_DEBUG                 - Enable debug logging "yes"/"no" (default: "no")

Accessing Configuration:

    from pywwcp.config import settings

    depth = settings.history_max_depth
"""
import logging
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings

log = logging.getLogger(__name__)


class Settings(BaseSettings):
    """pyWWCP settings."""

    # Status histories
    history_max_depth: int = Field(default=50, ge=1, alias="WWCP_HISTORY_MAX_DEPTH")
    default_history_size: int = Field(default=1, ge=1, alias="WWCP_DEFAULT_HISTORY_SIZE")

    # Mutation
    lock_timeout: float = Field(default=2.0, gt=0, alias="WWCP_LOCK_TIMEOUT")
    mutation_retries: int = Field(default=3, ge=0, alias="WWCP_MUTATION_RETRIES")

    # Upstream notification
    send_upstream: bool = Field(default=True, alias="WWCP_SEND_UPSTREAM")
    upstream_url: Optional[str] = Field(default=None, alias="WWCP_UPSTREAM_URL")
    upstream_timeout: float = Field(default=5.0, gt=0, alias="WWCP_UPSTREAM_TIMEOUT")

    debug: bool = Field(default=False, alias="WWCP_DEBUG")

    model_config = {
        "env_prefix": "",
        "case_sensitive": False,
        "env_file": ".env",
        "extra": "ignore",
        "populate_by_name": True,
    }


# Global settings instance
settings = Settings()

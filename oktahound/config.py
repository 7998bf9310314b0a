"""OktaHound configuration management.

Uses pydantic-settings to load configuration from environment variables
and .env files with validation.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DEFAULT_PAGE_LIMIT
from .errors import IntegrationValidationError


class Settings(BaseSettings):
    """OktaHound settings.

    All settings can be overridden via environment variables
    prefixed with OKTAHOUND_.

    Example:
        OKTAHOUND_OKTA_ORG_URL=https://acme.okta.com
        OKTAHOUND_OKTA_API_KEY=00abc...
    """

    model_config = SettingsConfigDict(
        env_prefix="OKTAHOUND_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Okta
    okta_org_url: str = Field(default="", description="Okta organization URL")
    okta_api_key: str = Field(default="", description="Okta API token (SSWS)")
    page_limit: int = Field(default=DEFAULT_PAGE_LIMIT, description="Records requested per page")
    request_timeout: float = Field(default=30.0, description="HTTP request timeout in seconds")
    max_retries: int = Field(default=5, description="Retries for rate-limited or failed requests")

    # Neo4j Database
    neo4j_uri: str = Field(default="bolt://localhost:7687", description="Neo4j connection URI")
    neo4j_user: str = Field(default="neo4j", description="Neo4j username")
    neo4j_password: str = Field(default="", description="Neo4j password")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings instance loaded from environment
    """
    return Settings()


def validate_invocation(settings: Settings) -> None:
    """Check that the settings carry everything needed to reach Okta.

    Raises:
        IntegrationValidationError: If the org URL or API key is missing
    """
    missing = [
        name for name in ("okta_org_url", "okta_api_key") if not getattr(settings, name)
    ]
    if missing:
        raise IntegrationValidationError(
            f"Missing required configuration: {', '.join(missing)}",
            details={"missing": missing},
        )
    if not settings.okta_org_url.startswith("https://"):
        raise IntegrationValidationError(
            "okta_org_url must be an https:// URL",
            details={"okta_org_url": settings.okta_org_url},
        )

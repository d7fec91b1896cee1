"""
Configuration management for the JWKS key resolver.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class JWKSSettings(BaseSettings):
    """Key set source and cache settings.

    Every field can be supplied through a ``JWKS_``-prefixed environment
    variable (``JWKS_URI``, ``JWKS_FILE``, ``JWKS_KEYSET_TTL_SECONDS``, ...) or a ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_prefix="JWKS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Source
    uri: Optional[str] = None
    file: Optional[str] = None
    http_timeout: float = Field(default=10.0, gt=0)
    validate_on_startup: bool = False

    # Key set cache
    keyset_ttl_seconds: float = Field(default=24 * 60 * 60, gt=0)

    # Resolved key cache
    key_cache_enabled: bool = True
    key_cache_ttl_seconds: float = Field(default=23 * 60 * 60, gt=0)
    key_cache_maxsize: int = Field(default=1024, gt=0)


def get_settings(**overrides) -> JWKSSettings:
    """Build settings from the environment, with explicit overrides taking precedence."""
    return JWKSSettings(**overrides)

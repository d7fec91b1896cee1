"""
Explicit construction of sources and clients from settings.
"""

import time
from typing import Callable, Optional

from shared.config import JWKSSettings
from shared.errors import ConfigurationError
from shared.logging import get_logger
from shared.metrics import MetricsCollector

from .cache import CachedSource
from .client import JWKSClient
from .key_cache import KeyCache
from .sources import (
    EndpointSource,
    FileSource,
    KeySetSource,
    must_endpoint_source,
    must_file_source,
)


logger = get_logger("jwks.factory")


def build_source(settings: JWKSSettings, *, metrics: Optional[MetricsCollector] = None) -> KeySetSource:
    """Create the endpoint or file source named by ``settings``."""
    if settings.uri:
        if settings.validate_on_startup:
            return must_endpoint_source(settings.uri, timeout=settings.http_timeout, metrics=metrics)
        return EndpointSource(settings.uri, timeout=settings.http_timeout, metrics=metrics)

    if settings.file:
        if settings.validate_on_startup:
            return must_file_source(settings.file, metrics=metrics)
        return FileSource(settings.file, metrics=metrics)

    raise ConfigurationError("Either JWKS_URI or JWKS_FILE must be configured")


def build_client(
    settings: JWKSSettings,
    *,
    source: Optional[KeySetSource] = None,
    clock: Callable[[], float] = time.monotonic,
    metrics: Optional[MetricsCollector] = None,
) -> JWKSClient:
    """Wire a ``JWKSClient`` with its key set cache and optional key cache.

    ``source`` overrides the source described by ``settings``.
    """
    if source is None:
        source = build_source(settings, metrics=metrics)

    cached = CachedSource(source, settings.keyset_ttl_seconds, clock=clock)

    key_cache = None
    if settings.key_cache_enabled:
        key_cache = KeyCache(
            settings.key_cache_ttl_seconds,
            maxsize=settings.key_cache_maxsize,
            clock=clock,
        )

    logger.info(
        "JWKS client configured",
        source=type(source).__name__,
        keyset_ttl_seconds=settings.keyset_ttl_seconds,
        key_cache_enabled=settings.key_cache_enabled,
    )
    return JWKSClient(cached, key_cache=key_cache, metrics=metrics)

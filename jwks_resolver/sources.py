"""
Key set sources.

A source produces the current ``KeySet`` on every call to ``fetch_key_set``;
caching is layered on top by ``CachedSource``.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional, Protocol, Union

import httpx

from shared.errors import BadStatus, MalformedPayload, SourceUnavailable, KeySetSourceError
from shared.logging import get_logger
from shared.metrics import MetricsCollector

from .models import KeySet


DEFAULT_HTTP_TIMEOUT = 10.0


class KeySetSource(Protocol):
    """Anything that can produce the current key set."""

    def fetch_key_set(self) -> KeySet:
        ...


class _InstrumentedSource(ABC):
    """Shared logging and metrics for fetching sources."""

    kind = "source"

    def __init__(self, metrics: Optional[MetricsCollector] = None):
        self.metrics = metrics
        self.logger = get_logger(f"jwks.source.{self.kind}")

    @property
    @abstractmethod
    def location(self) -> str:
        """Where the key set is loaded from, for logs."""

    @abstractmethod
    def _load(self) -> KeySet:
        """Load and decode the key set once."""

    def fetch_key_set(self) -> KeySet:
        """Fetch and decode the key set, raising a ``KeySetSourceError`` on failure."""
        try:
            if self.metrics:
                with self.metrics.time_operation("jwks_fetch_duration_seconds", source=self.kind):
                    key_set = self._load()
            else:
                key_set = self._load()
        except KeySetSourceError as exc:
            self.logger.warning(
                "Key set fetch failed",
                location=self.location,
                code=exc.code,
                error=exc.message,
            )
            if self.metrics:
                self.metrics.record_fetch(self.kind, exc.code.lower())
            raise

        self.logger.debug("Key set fetched", location=self.location, keys_count=len(key_set))
        if self.metrics:
            self.metrics.record_fetch(self.kind, "success")
        return key_set


class EndpointSource(_InstrumentedSource):
    """Fetch a JWKS document with an HTTP GET."""

    kind = "endpoint"

    def __init__(
        self,
        jwks_uri: str,
        *,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        client: Optional[httpx.Client] = None,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        super().__init__(metrics)
        self.jwks_uri = jwks_uri
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=timeout,
            follow_redirects=False,
            headers={"Accept": "application/json"},
        )

    @property
    def location(self) -> str:
        return self.jwks_uri

    def _load(self) -> KeySet:
        try:
            response = self._client.get(self.jwks_uri)
        except httpx.HTTPError as exc:
            raise SourceUnavailable(self.jwks_uri, str(exc) or type(exc).__name__) from exc

        if not 200 <= response.status_code < 300:
            raise BadStatus(self.jwks_uri, response.status_code)

        try:
            payload = response.json()
        except ValueError as exc:
            raise MalformedPayload(self.jwks_uri, str(exc)) from exc

        return KeySet.from_payload(payload, source=self.jwks_uri)

    def close(self) -> None:
        """Close the HTTP client if this source created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "EndpointSource":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class FileSource(_InstrumentedSource):
    """Read a JWKS document from the local filesystem on every fetch."""

    kind = "file"

    def __init__(self, file_path: str, *, metrics: Optional[MetricsCollector] = None) -> None:
        super().__init__(metrics)
        self.file_path = str(file_path)

    @property
    def location(self) -> str:
        return self.file_path

    def _load(self) -> KeySet:
        try:
            with open(self.file_path, "rb") as f:
                content = f.read()
        except OSError as exc:
            raise SourceUnavailable(self.file_path, str(exc)) from exc

        try:
            payload = json.loads(content)
        except ValueError as exc:
            raise MalformedPayload(self.file_path, str(exc)) from exc

        return KeySet.from_payload(payload, source=self.file_path)


class StaticSource:
    """Serve a fixed key set, e.g. one embedded in configuration or tests."""

    def __init__(self, key_set: Union[KeySet, Mapping[str, Any]]) -> None:
        if not isinstance(key_set, KeySet):
            key_set = KeySet.from_payload(key_set, source="static")
        self._key_set = key_set

    def fetch_key_set(self) -> KeySet:
        return self._key_set


def must_endpoint_source(jwks_uri: str, **kwargs) -> EndpointSource:
    """Build an ``EndpointSource`` and fail fast if the first fetch does not succeed."""
    source = EndpointSource(jwks_uri, **kwargs)
    _validate_on_startup(source)
    return source


def must_file_source(file_path: str, **kwargs) -> FileSource:
    """Build a ``FileSource`` and fail fast if the file cannot be loaded."""
    source = FileSource(file_path, **kwargs)
    _validate_on_startup(source)
    return source


def _validate_on_startup(source: _InstrumentedSource) -> None:
    try:
        source.fetch_key_set()
    except KeySetSourceError as exc:
        source.logger.critical(
            "Key set source failed startup validation",
            location=source.location,
            code=exc.code,
            details=exc.details,
        )
        raise

"""
TTL-bounded caching of a key set source.
"""

from __future__ import annotations

import threading
import time
from datetime import timedelta
from typing import Callable, Optional, Union

from shared.logging import get_logger

from .models import KeySet
from .sources import KeySetSource


DEFAULT_KEYSET_TTL = 24 * 60 * 60

Clock = Callable[[], float]


def ttl_seconds(ttl: Union[int, float, timedelta]) -> float:
    """Normalize a TTL given in seconds or as a ``timedelta``."""
    if isinstance(ttl, timedelta):
        ttl = ttl.total_seconds()
    ttl = float(ttl)
    if ttl <= 0:
        raise ValueError(f"TTL must be positive, got {ttl}")
    return ttl


class CachedSource:
    """Hold the last fetched key set of a source until its TTL elapses.

    A single lock spans the expiry check and the fetch itself; callers that
    arrive while a refresh is in flight wait for it. A failed fetch leaves the
    cached set and its expiry untouched and the error goes to the caller.
    """

    def __init__(
        self,
        source: KeySetSource,
        ttl: Union[int, float, timedelta] = DEFAULT_KEYSET_TTL,
        *,
        clock: Clock = time.monotonic,
    ) -> None:
        self.source = source
        self._ttl = ttl_seconds(ttl)
        self._clock = clock
        self._lock = threading.Lock()
        self._key_set: Optional[KeySet] = None
        self._expires_at: float = 0.0
        self.logger = get_logger("jwks.cache")

    @property
    def ttl(self) -> float:
        return self._ttl

    @property
    def expires_at(self) -> Optional[float]:
        """Clock reading after which the cached set is refreshed; None when empty."""
        with self._lock:
            return self._expires_at if self._key_set is not None else None

    def get_key_set(self) -> KeySet:
        """Return the cached key set, fetching it first if absent or expired."""
        with self._lock:
            if self._key_set is None or self._clock() >= self._expires_at:
                key_set = self.source.fetch_key_set()
                self._key_set = key_set
                self._expires_at = self._clock() + self._ttl
                self.logger.info(
                    "Key set refreshed",
                    keys_count=len(key_set),
                    ttl_seconds=self._ttl,
                )
            return self._key_set

    # A cached source can stand in wherever a plain source is expected.
    fetch_key_set = get_key_set

    def invalidate(self) -> None:
        """Drop the cached key set so the next call fetches."""
        with self._lock:
            self._key_set = None
            self._expires_at = 0.0
        self.logger.info("Key set cache invalidated")

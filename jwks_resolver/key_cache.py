"""
Expiring cache of already resolved keys.
"""

from __future__ import annotations

import threading
import time
from datetime import timedelta
from typing import Callable, Optional, Union

from cachetools import TTLCache

from .cache import ttl_seconds
from .models import Key


DEFAULT_KEY_TTL = 23 * 60 * 60
DEFAULT_KEY_CACHE_MAXSIZE = 1024


class KeyCache:
    """Thread-safe TTL map from a key identifier to a resolved ``Key``.

    Entries expire on their own clock, independently of the key set cache.
    When ``maxsize`` is reached the least recently used entry is evicted.
    """

    def __init__(
        self,
        ttl: Union[int, float, timedelta] = DEFAULT_KEY_TTL,
        *,
        maxsize: int = DEFAULT_KEY_CACHE_MAXSIZE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._cache: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl_seconds(ttl), timer=clock)
        self._lock = threading.Lock()

    def get(self, key_id: str) -> Optional[Key]:
        with self._lock:
            return self._cache.get(key_id)

    def set(self, key_id: str, key: Key) -> None:
        with self._lock:
            self._cache[key_id] = key

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        with self._lock:
            # TTLCache only drops expired entries when touched.
            self._cache.expire()
            return len(self._cache)

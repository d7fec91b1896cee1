"""
JWKS client: select signing and encryption keys from a key set source.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional

from shared.errors import (
    AlgorithmMismatch,
    KeyIdNotFound,
    KeyLookupError,
    MissingKeyId,
    NoUsableKey,
)
from shared.logging import get_logger
from shared.metrics import MetricsCollector

from .key_cache import KeyCache
from .models import Key, USE_ENCRYPTION, USE_SIGNATURE
from .sources import KeySetSource


KeyFunc = Callable[[Mapping[str, Any]], Any]


class JWKSClient:
    """Resolve keys by ``kid`` and use.

    ``source`` is usually a ``CachedSource``; ``key_cache`` is an optional
    second-level cache of resolved keys. Both may be swapped at runtime by
    assigning the attributes.
    """

    def __init__(
        self,
        source: KeySetSource,
        *,
        key_cache: Optional[KeyCache] = None,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        self.source = source
        self.key_cache = key_cache
        self.metrics = metrics
        self.logger = get_logger("jwks.client")

    def resolve_key(self, kid: str, use: str) -> Key:
        """Return the first valid public key in the set matching ``kid`` and ``use``.

        Source errors propagate unchanged. Raises ``KeyIdNotFound`` when no key
        carries ``kid`` and ``NoUsableKey`` when none of those qualifies.
        """
        key_set = self.source.fetch_key_set()

        candidates = key_set.key(kid)
        try:
            if not candidates:
                raise KeyIdNotFound(kid)

            for key in candidates:
                if key.usable_for(use):
                    self._record_resolution(use, "success")
                    return key
            raise NoUsableKey(kid, use)
        except KeyLookupError as exc:
            self.logger.warning("Key resolution failed", kid=kid, use=use, code=exc.code)
            self._record_resolution(use, exc.code.lower())
            raise

    def signing_key(self, kid: str) -> Key:
        """Resolve the signature verification key for ``kid``."""
        return self._cached_key(kid, USE_SIGNATURE)

    def encryption_key(self, kid: str) -> Key:
        """Resolve the encryption key for ``kid``."""
        return self._cached_key(kid, USE_ENCRYPTION)

    def _cached_key(self, kid: str, use: str) -> Key:
        if self.key_cache is None:
            return self.resolve_key(kid, use)

        cache_id = f"{use}:{kid}"
        key = self.key_cache.get(cache_id)
        if key is not None:
            self._record_cache("hit")
            return key

        self._record_cache("miss")
        key = self.resolve_key(kid, use)
        self.key_cache.set(cache_id, key)
        return key

    def key_func(self) -> KeyFunc:
        """Build a key lookup callback for token verification.

        The callback takes the token's parsed header and returns the key
        material for the signature check. The header must carry a string
        ``kid`` and an ``alg`` equal to the algorithm declared by the key.
        """

        def lookup(header: Mapping[str, Any]) -> Any:
            kid = header.get("kid")
            if not isinstance(kid, str):
                raise MissingKeyId()

            key = self.signing_key(kid)

            token_alg = header.get("alg")
            if not isinstance(token_alg, str) or token_alg != key.algorithm:
                self.logger.warning(
                    "Token algorithm does not match key",
                    kid=kid,
                    token_alg=token_alg,
                    key_alg=key.algorithm,
                )
                raise AlgorithmMismatch(token_alg, key.algorithm)

            return key.material

        return lookup

    def _record_cache(self, result: str) -> None:
        if self.metrics:
            self.metrics.record_key_cache(result)

    def _record_resolution(self, use: str, outcome: str) -> None:
        if self.metrics:
            self.metrics.record_resolution(use, outcome)

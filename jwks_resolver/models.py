"""
Key set data model.

A ``KeySet`` is decoded once per fetch and never mutated afterwards; a refresh
produces a new instance. Key material is parsed by python-jose.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from jose import jwk
from jose.constants import ALGORITHMS
from jose.exceptions import JWKError

from shared.errors import MalformedPayload
from shared.logging import get_logger


logger = get_logger("jwks.models")

USE_SIGNATURE = "sig"
USE_ENCRYPTION = "enc"

PRIVATE_MEMBERS = frozenset({"d", "p", "q", "dp", "dq", "qi"})
ASYMMETRIC_KEY_TYPES = frozenset({"RSA", "EC"})

REQUIRED_MEMBERS: Dict[str, Tuple[str, ...]] = {
    "RSA": ("n", "e"),
    "EC": ("crv", "x", "y"),
    "oct": ("k",),
}

# Algorithms python-jose can bind to each key type.
KEY_TYPE_ALGORITHMS = {
    "RSA": ALGORITHMS.RSA,
    "EC": ALGORITHMS.EC,
    "oct": ALGORITHMS.HMAC,
}

EC_CURVE_ALGORITHMS = {
    "P-256": ALGORITHMS.ES256,
    "P-384": ALGORITHMS.ES384,
    "P-521": ALGORITHMS.ES512,
}


def _construct_algorithm(data: Mapping[str, Any]) -> Optional[str]:
    """Pick the algorithm used to build key material for ``data``."""
    kty = data.get("kty")
    declared = data.get("alg")
    if isinstance(declared, str) and declared in KEY_TYPE_ALGORITHMS.get(kty, ()):
        return declared
    if kty == "RSA":
        return ALGORITHMS.RS256
    if kty == "EC":
        crv = data.get("crv")
        return EC_CURVE_ALGORITHMS.get(crv) if isinstance(crv, str) else None
    if kty == "oct":
        return ALGORITHMS.HS256
    return None


def _is_member(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def _construct_material(data: Mapping[str, Any]) -> Optional[Any]:
    """Build python-jose key material, or return None if the JWK is not usable."""
    kty = data["kty"]
    required = REQUIRED_MEMBERS.get(kty)
    if required is None or not all(_is_member(data.get(name)) for name in required):
        return None

    algorithm = _construct_algorithm(data)
    if algorithm is None:
        return None

    try:
        return jwk.construct(dict(data), algorithm)
    except (JWKError, ValueError, TypeError, AttributeError) as exc:
        logger.debug("Rejected key material", kid=data.get("kid"), kty=kty, error=str(exc))
        return None


@dataclass(frozen=True)
class Key:
    """A single JSON Web Key and the metadata used to select it."""

    kid: Optional[str]
    key_type: str
    use: Optional[str] = None
    algorithm: Optional[str] = None
    is_public: bool = False
    is_valid: bool = False
    material: Any = field(default=None, compare=False, repr=False)
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Key":
        """Decode one JWK object. ``data`` must carry a string ``kty``."""
        kty = data["kty"]
        material = _construct_material(data)
        return cls(
            kid=data.get("kid"),
            key_type=kty,
            use=data.get("use"),
            algorithm=data.get("alg"),
            is_public=kty in ASYMMETRIC_KEY_TYPES and not PRIVATE_MEMBERS.intersection(data),
            is_valid=material is not None,
            material=material,
            raw=MappingProxyType(dict(data)),
        )

    def usable_for(self, use: str) -> bool:
        """True when this is a valid public key declared for ``use``."""
        return self.use == use and self.is_public and self.is_valid


@dataclass(frozen=True)
class KeySet:
    """An ordered, immutable collection of keys from one fetch."""

    keys: Tuple[Key, ...] = ()

    def __len__(self) -> int:
        return len(self.keys)

    def __iter__(self):
        return iter(self.keys)

    def key(self, kid: str) -> List[Key]:
        """Return the keys whose identifier equals ``kid``, in source order."""
        return [key for key in self.keys if key.kid == kid]

    @classmethod
    def from_payload(cls, payload: Any, source: str = "payload") -> "KeySet":
        """Decode a JWKS document (``{"keys": [...]}``)."""
        if not isinstance(payload, Mapping):
            raise MalformedPayload(source, "key set document must be a JSON object")

        entries = payload.get("keys")
        if not isinstance(entries, list):
            raise MalformedPayload(source, "key set document missing 'keys' array")

        keys = []
        for index, entry in enumerate(entries):
            if not isinstance(entry, Mapping) or not isinstance(entry.get("kty"), str):
                raise MalformedPayload(source, f"key at index {index} is not a JWK object with 'kty'")
            keys.append(Key.from_dict(entry))

        return cls(keys=tuple(keys))

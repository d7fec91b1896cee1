"""
Shared fixtures for JWKS resolver tests.
"""

import threading
from typing import Any, Dict, List, Union

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from jose import jwk

from jwks_resolver.models import KeySet


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingSource:
    """Source stub that returns (or raises) queued results and counts fetches."""

    def __init__(self, *results: Union[KeySet, Exception]):
        self.results: List[Union[KeySet, Exception]] = list(results)
        self.calls = 0
        self._lock = threading.Lock()

    def fetch_key_set(self) -> KeySet:
        with self._lock:
            self.calls += 1
            result = self.results[0] if len(self.results) == 1 else self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def _pem(private_key) -> str:
    return private_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode("ascii")


def _public_pem(private_key) -> str:
    return private_key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode("ascii")


@pytest.fixture(scope="session")
def rsa_private_pem() -> str:
    """PEM encoded RSA private key used to sign test tokens."""
    return _pem(rsa.generate_private_key(public_exponent=65537, key_size=2048))


@pytest.fixture(scope="session")
def other_rsa_private_pem() -> str:
    """A second, unrelated RSA private key."""
    return _pem(rsa.generate_private_key(public_exponent=65537, key_size=2048))


@pytest.fixture(scope="session")
def rsa_public_jwk(rsa_private_pem) -> Dict[str, Any]:
    """Public JWK members (kty, n, e) of ``rsa_private_pem``."""
    members = jwk.construct(rsa_private_pem, "RS256").public_key().to_dict()
    return {name: members[name] for name in ("kty", "n", "e")}


@pytest.fixture(scope="session")
def rsa_private_jwk(rsa_private_pem) -> Dict[str, Any]:
    """Full private JWK members of ``rsa_private_pem``."""
    members = jwk.construct(rsa_private_pem, "RS256").to_dict()
    members.pop("alg", None)
    return members


@pytest.fixture(scope="session")
def ec_public_jwk() -> Dict[str, Any]:
    """Public P-256 JWK members (kty, crv, x, y)."""
    private_key = ec.generate_private_key(ec.SECP256R1())
    members = jwk.construct(_public_pem(private_key), "ES256").to_dict()
    return {name: members[name] for name in ("kty", "crv", "x", "y")}


@pytest.fixture
def make_jwk(rsa_public_jwk):
    """Build a JWK dict from the test RSA public key with the given metadata."""

    def _make(kid="a", use="sig", alg="RS256", **extra) -> Dict[str, Any]:
        data = dict(rsa_public_jwk, kid=kid)
        if use is not None:
            data["use"] = use
        if alg is not None:
            data["alg"] = alg
        data.update(extra)
        return data

    return _make


@pytest.fixture
def jwks_payload(make_jwk) -> Dict[str, Any]:
    """Key set with one signing and one encryption key sharing ``kid`` "a"."""
    return {
        "keys": [
            make_jwk(kid="a", use="sig", alg="RS256"),
            make_jwk(kid="a", use="enc", alg="RSA-OAEP"),
        ]
    }


@pytest.fixture
def key_set(jwks_payload) -> KeySet:
    return KeySet.from_payload(jwks_payload)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def counting_source():
    """Factory for ``CountingSource`` stubs."""
    return CountingSource

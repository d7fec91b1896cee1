"""
JWKS key resolution.

Fetches a JSON Web Key Set from an HTTP endpoint or a file, caches it for a
bounded TTL and selects signing/encryption keys by ``kid``:

    source = CachedSource(EndpointSource("https://idp.example/jwks"))
    client = JWKSClient(source, key_cache=KeyCache())
    claims = decode_token(token, client.key_func())
"""

from .cache import CachedSource, DEFAULT_KEYSET_TTL
from .client import JWKSClient, KeyFunc
from .factory import build_client, build_source
from .key_cache import KeyCache, DEFAULT_KEY_TTL
from .models import Key, KeySet, USE_ENCRYPTION, USE_SIGNATURE
from .sources import (
    EndpointSource,
    FileSource,
    KeySetSource,
    StaticSource,
    must_endpoint_source,
    must_file_source,
)
from .verify import decode_token

__all__ = [
    "CachedSource",
    "DEFAULT_KEYSET_TTL",
    "DEFAULT_KEY_TTL",
    "EndpointSource",
    "FileSource",
    "JWKSClient",
    "Key",
    "KeyCache",
    "KeyFunc",
    "KeySet",
    "KeySetSource",
    "StaticSource",
    "USE_ENCRYPTION",
    "USE_SIGNATURE",
    "build_client",
    "build_source",
    "decode_token",
    "must_endpoint_source",
    "must_file_source",
]

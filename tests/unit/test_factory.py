"""
Unit tests for settings-driven construction.
"""

import json

import pytest

from jwks_resolver.cache import CachedSource
from jwks_resolver.factory import build_client, build_source
from jwks_resolver.key_cache import KeyCache
from jwks_resolver.sources import EndpointSource, FileSource, StaticSource
from shared.config import JWKSSettings, get_settings
from shared.errors import ConfigurationError, SourceUnavailable


class TestSettings:
    """Test cases for JWKSSettings."""

    def test_defaults(self, monkeypatch):
        """Test default TTLs follow the key set and key cache defaults."""
        monkeypatch.delenv("JWKS_URI", raising=False)
        monkeypatch.delenv("JWKS_FILE", raising=False)
        settings = JWKSSettings()

        assert settings.uri is None
        assert settings.keyset_ttl_seconds == 86400
        assert settings.key_cache_ttl_seconds == 82800
        assert settings.key_cache_enabled is True
        assert settings.http_timeout == 10.0
        assert settings.validate_on_startup is False

    def test_environment(self, monkeypatch):
        """Test values are read from JWKS_-prefixed variables."""
        monkeypatch.setenv("JWKS_URI", "https://idp.example.com/jwks")
        monkeypatch.setenv("JWKS_KEYSET_TTL_SECONDS", "300")
        monkeypatch.setenv("JWKS_KEY_CACHE_ENABLED", "false")

        settings = get_settings()

        assert settings.uri == "https://idp.example.com/jwks"
        assert settings.keyset_ttl_seconds == 300
        assert settings.key_cache_enabled is False

    def test_overrides(self):
        """Test keyword overrides by field name."""
        settings = get_settings(file="/etc/jwks.json", key_cache_maxsize=10)

        assert settings.file == "/etc/jwks.json"
        assert settings.key_cache_maxsize == 10


class TestBuildSource:
    """Test cases for build_source."""

    def test_endpoint(self):
        """Test a URI selects the endpoint source."""
        source = build_source(get_settings(uri="https://idp.example.com/jwks", http_timeout=2.0))

        assert isinstance(source, EndpointSource)
        assert source.jwks_uri == "https://idp.example.com/jwks"
        source.close()

    def test_file(self, tmp_path):
        """Test a path selects the file source."""
        source = build_source(get_settings(uri=None, file=str(tmp_path / "jwks.json")))

        assert isinstance(source, FileSource)

    def test_neither(self):
        """Test missing source configuration is rejected."""
        with pytest.raises(ConfigurationError):
            build_source(get_settings(uri=None, file=None))

    def test_validate_on_startup(self, tmp_path, jwks_payload):
        """Test startup validation loads the file once and fails fast when missing."""
        path = tmp_path / "jwks.json"
        with pytest.raises(SourceUnavailable):
            build_source(get_settings(uri=None, file=str(path), validate_on_startup=True))

        path.write_text(json.dumps(jwks_payload))
        source = build_source(get_settings(uri=None, file=str(path), validate_on_startup=True))

        assert isinstance(source, FileSource)


class TestBuildClient:
    """Test cases for build_client."""

    def test_wires_caches(self, key_set, clock):
        """Test the client gets a cached source and a key cache."""
        settings = get_settings(keyset_ttl_seconds=120, key_cache_ttl_seconds=60)

        client = build_client(settings, source=StaticSource(key_set), clock=clock)

        assert isinstance(client.source, CachedSource)
        assert client.source.ttl == 120
        assert isinstance(client.key_cache, KeyCache)
        assert client.signing_key("a") is key_set.keys[0]

    def test_key_cache_disabled(self, key_set):
        """Test the key cache is optional."""
        client = build_client(get_settings(key_cache_enabled=False), source=StaticSource(key_set))

        assert client.key_cache is None
        assert client.encryption_key("a") is key_set.keys[1]

    def test_independent_instances(self, key_set):
        """Test each build returns its own caches."""
        settings = get_settings()
        first = build_client(settings, source=StaticSource(key_set))
        second = build_client(settings, source=StaticSource(key_set))

        assert first.source is not second.source
        assert first.key_cache is not second.key_cache

    def test_from_file(self, tmp_path, jwks_payload):
        """Test a file-backed client resolves keys."""
        path = tmp_path / "jwks.json"
        path.write_text(json.dumps(jwks_payload))

        client = build_client(get_settings(uri=None, file=str(path)))

        assert client.signing_key("a").use == "sig"

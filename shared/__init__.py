"""
Shared utilities for the JWKS key resolver.

This package aggregates the ambient building blocks used by ``jwks_resolver``:

- config: Resolver configuration via pydantic-settings
- logging: Structured logging with structlog
- metrics: Prometheus counters for fetches, cache lookups and resolutions
- errors: Canonical error types and responses

Do not import from ``jwks_resolver`` into shared/.
"""

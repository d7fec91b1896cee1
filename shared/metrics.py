"""
Prometheus metrics for the JWKS key resolver.
"""

import time
from contextlib import contextmanager
from typing import Any, Dict, Optional

from prometheus_client import Counter, Histogram, CollectorRegistry, REGISTRY


class MetricsCollector:
    """Centralized metrics collector for key set fetches and key resolution."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry if registry is not None else REGISTRY
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up the resolver metrics."""
        self._metrics["jwks_fetch_total"] = Counter(
            "jwks_fetch_total",
            "Total key set fetches",
            ["source", "outcome"],
            registry=self.registry
        )

        self._metrics["jwks_fetch_duration_seconds"] = Histogram(
            "jwks_fetch_duration_seconds",
            "Key set fetch duration in seconds",
            ["source"],
            registry=self.registry
        )

        self._metrics["jwks_key_cache_total"] = Counter(
            "jwks_key_cache_total",
            "Resolved key cache lookups",
            ["result"],
            registry=self.registry
        )

        self._metrics["jwks_resolution_total"] = Counter(
            "jwks_resolution_total",
            "Total key resolutions",
            ["use", "outcome"],
            registry=self.registry
        )

    def record_fetch(self, source: str, outcome: str):
        """Record a key set fetch attempt."""
        self._metrics["jwks_fetch_total"].labels(source=source, outcome=outcome).inc()

    def record_key_cache(self, result: str):
        """Record a resolved key cache lookup (``hit`` or ``miss``)."""
        self._metrics["jwks_key_cache_total"].labels(result=result).inc()

    def record_resolution(self, use: str, outcome: str):
        """Record the outcome of a key resolution."""
        self._metrics["jwks_resolution_total"].labels(use=use, outcome=outcome).inc()

    @contextmanager
    def time_operation(self, operation_name: str, **labels):
        """Context manager to time an operation."""
        start_time = time.time()
        try:
            yield
        finally:
            duration = time.time() - start_time
            if operation_name in self._metrics:
                self._metrics[operation_name].labels(**labels).observe(duration)

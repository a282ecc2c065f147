"""
Shared metrics configuration for the JWT access layer.
"""

from prometheus_client import Counter, Histogram, Info, CollectorRegistry, generate_latest
from typing import Dict, Any, Optional


class MetricsCollector:
    """Centralized metrics collector for services."""

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        # Each collector owns a registry so several apps can live in one process
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up common metrics for the service."""

        self._metrics["service_info"] = Info(
            "service_info",
            "Service information",
            registry=self.registry
        )
        self._metrics["service_info"].info({
            "service": self.service_name,
            "version": "1.0.0"
        })

        # HTTP metrics
        self._metrics["http_requests_total"] = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status_code"],
            registry=self.registry
        )

        self._metrics["http_request_duration_seconds"] = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            registry=self.registry
        )

        self._metrics["health_check_total"] = Counter(
            "health_check_total",
            "Total health check requests",
            ["status"],
            registry=self.registry
        )

        self._setup_token_metrics()

    def _setup_token_metrics(self):
        """Set up signing and verification metrics."""
        self._metrics["tokens_signed_total"] = Counter(
            "tokens_signed_total",
            "Total tokens signed",
            registry=self.registry
        )

        self._metrics["token_verifications_total"] = Counter(
            "token_verifications_total",
            "Total token verifications",
            ["outcome"],
            registry=self.registry
        )

        self._metrics["jwks_fetch_total"] = Counter(
            "jwks_fetch_total",
            "Total JWKS fetches",
            ["status"],
            registry=self.registry
        )

        self._metrics["jwks_fetch_duration_seconds"] = Histogram(
            "jwks_fetch_duration_seconds",
            "JWKS fetch duration in seconds",
            registry=self.registry
        )

    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)

    def export(self) -> bytes:
        """Render the registry in the Prometheus text format."""
        return generate_latest(self.registry)

    def record_http_request(self, method: str, endpoint: str, status_code: int, duration: float):
        """Record HTTP request metrics."""
        self._metrics["http_requests_total"].labels(
            method=method,
            endpoint=endpoint,
            status_code=str(status_code)
        ).inc()

        self._metrics["http_request_duration_seconds"].labels(
            method=method,
            endpoint=endpoint
        ).observe(duration)

    def record_health_check(self, status: str):
        """Record health check metrics."""
        self._metrics["health_check_total"].labels(status=status).inc()

    def record_signed(self):
        """Record a signed token."""
        self._metrics["tokens_signed_total"].inc()

    def record_verification(self, outcome: str):
        """Record a verification outcome."""
        self._metrics["token_verifications_total"].labels(outcome=outcome).inc()

    def record_jwks_fetch(self, status: str, duration: float):
        """Record a JWKS fetch and its duration."""
        self._metrics["jwks_fetch_total"].labels(status=status).inc()
        self._metrics["jwks_fetch_duration_seconds"].observe(duration)


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name, registry)

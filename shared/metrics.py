"""
Shared metrics configuration for the Permify access layer.
"""

from typing import Dict, Any, Optional
import time
import threading
from contextlib import contextmanager

from prometheus_client import Counter, Histogram, Info, CollectorRegistry


class MetricsCollector:
    """Centralized metrics collector for services."""

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry
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

        self._metrics["errors_total"] = Counter(
            "errors_total",
            "Total errors",
            ["error_type", "service"],
            registry=self.registry
        )

        # Permission gate
        self._metrics["permission_checks_total"] = Counter(
            "permission_checks_total",
            "Total permission gate decisions",
            ["outcome"],
            registry=self.registry
        )

        self._metrics["permission_check_duration_seconds"] = Histogram(
            "permission_check_duration_seconds",
            "Duration of remote permission checks in seconds",
            ["entity", "permission"],
            registry=self.registry
        )

    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)

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

    def record_error(self, error_type: str, service: Optional[str] = None):
        """Record error metrics."""
        service_name = service or self.service_name
        self._metrics["errors_total"].labels(error_type=error_type, service=service_name).inc()

    def record_permission_decision(self, outcome: str):
        """Record a permission gate outcome (allowed, denied, check_failed...)."""
        self._metrics["permission_checks_total"].labels(outcome=outcome).inc()

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


_collectors: Dict[str, MetricsCollector] = {}
_collectors_lock = threading.Lock()


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service.

    Collectors bound to the default registry are cached per service name,
    since prometheus_client refuses to register the same series twice.
    """
    if registry is not None:
        return MetricsCollector(service_name, registry)

    with _collectors_lock:
        if service_name not in _collectors:
            _collectors[service_name] = MetricsCollector(service_name)
        return _collectors[service_name]

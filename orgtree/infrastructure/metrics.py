"""Prometheus metrics collection and registry"""

import time

from prometheus_client import (
    Counter, Histogram, Gauge, Info,
    REGISTRY, generate_latest, CONTENT_TYPE_LATEST
)

from orgtree.core.config import settings


metrics_registry = REGISTRY  # Use default registry for compatibility

# ====================
# Service Information
# ====================

service_info = Info(
    "orgtree_service",
    "OrgTree service information",
    registry=metrics_registry
)

service_info.info({
    "version": settings.app_version,
    "environment": settings.environment,
    "directory_backend": settings.directory_backend,
    "service": "orgtree"
})

# ====================
# HTTP Metrics
# ====================

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint", "status"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
    registry=metrics_registry
)

http_requests_total = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status"],
    registry=metrics_registry
)

http_requests_in_progress = Gauge(
    "http_requests_in_progress",
    "Number of HTTP requests currently being processed",
    ["method", "endpoint"],
    registry=metrics_registry
)

# ====================
# Directory Metrics
# ====================

directory_operations_total = Counter(
    "directory_operations_total",
    "Total number of directory store primitives",
    ["operation", "outcome"],
    registry=metrics_registry
)

directory_operation_duration_seconds = Histogram(
    "directory_operation_duration_seconds",
    "Directory store primitive duration in seconds",
    ["operation"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
    registry=metrics_registry
)

lifecycle_operations_total = Counter(
    "lifecycle_operations_total",
    "Total number of organization and group lifecycle operations",
    ["operation", "outcome"],
    registry=metrics_registry
)

# ====================
# Authorization Metrics
# ====================

authorization_decisions_total = Counter(
    "authorization_decisions_total",
    "Total number of authorization decisions",
    ["capability", "allowed"],
    registry=metrics_registry
)

# ====================
# System Metrics
# ====================

health_check_status = Gauge(
    "health_check_status",
    "Health check status (1 = healthy, 0 = unhealthy)",
    ["check_type"],
    registry=metrics_registry
)

# ====================
# Logging Metrics
# ====================

log_messages_total = Counter(
    "log_messages_total",
    "Total number of log messages",
    ["level", "logger"],
    registry=metrics_registry
)


# ====================
# Helpers
# ====================

class MetricsContext:
    """Context manager for tracking metrics"""

    def __init__(self, histogram: Histogram, **labels):
        self.histogram = histogram
        self.labels = labels
        self.start_time = None

    def __enter__(self):
        self.start_time = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.start_time:
            duration = time.time() - self.start_time
            self.histogram.labels(**self.labels).observe(duration)


def get_metrics() -> bytes:
    """Generate metrics in Prometheus format"""
    return generate_latest(metrics_registry)


def get_metrics_content_type() -> str:
    """Get the content type for Prometheus metrics"""
    return CONTENT_TYPE_LATEST

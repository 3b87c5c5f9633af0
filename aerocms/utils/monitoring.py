"""Monitoring utilities leveraging Prometheus client."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

http_requests_total = Counter(
    "aerocms_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

http_request_latency_seconds = Histogram(
    "aerocms_http_request_latency_seconds",
    "HTTP request latency",
    ["method", "path"],
)

content_resolutions_total = Counter(
    "aerocms_content_resolutions_total",
    "Content finder outcomes by resolving finder",
    ["finder"],
)

redirects_served_total = Counter(
    "aerocms_redirects_served_total",
    "Redirects answered by the redirect middleware",
    ["status"],
)


def observe_request(method: str, path: str, status: int, duration_seconds: float) -> None:
    http_requests_total.labels(method=method, path=path, status=str(status)).inc()
    http_request_latency_seconds.labels(method=method, path=path).observe(duration_seconds)


def observe_resolution(finder: str) -> None:
    content_resolutions_total.labels(finder=finder).inc()


def observe_redirect(status: int) -> None:
    redirects_served_total.labels(status=str(status)).inc()

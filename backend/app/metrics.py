from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "dreamscape_requests_total",
    "Total HTTP requests processed by Dreamscape",
    ("method", "path", "status"),
)

REQUEST_LATENCY = Histogram(
    "dreamscape_request_latency_seconds",
    "HTTP request latency in seconds",
    ("method", "path"),
)

REQUEST_ERRORS = Counter(
    "dreamscape_request_errors_total",
    "HTTP requests resulting in server errors",
    ("method", "path", "status"),
)

USER_API_COUNTER = Counter(
    "dreamscape_user_api_hits_total",
    "Authenticated API hits per endpoint",
    ("endpoint",),
)

ADVICE_REQUESTS = Counter(
    "dreamscape_advice_requests_total",
    "Advice requests by outcome",
    ("result",),
)

__all__ = [
    "ADVICE_REQUESTS",
    "REQUEST_COUNT",
    "REQUEST_ERRORS",
    "REQUEST_LATENCY",
    "USER_API_COUNTER",
]

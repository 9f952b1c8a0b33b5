"""
Prometheus metrics and instrumentation helpers.
"""

from __future__ import annotations

import time
from typing import Awaitable, Callable

from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


HTTP_REQUESTS_TOTAL = Counter(
    "app_http_requests_total",
    "Total count of HTTP requests processed.",
    ["method", "path", "status"],
)

HTTP_REQUEST_DURATION = Histogram(
    "app_http_request_duration_seconds",
    "Histogram of HTTP request durations in seconds.",
    ["method", "path"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10),
)

HTTP_REQUEST_ERRORS = Counter(
    "app_http_request_errors_total",
    "Count of HTTP requests resulting in error responses.",
    ["method", "path", "status"],
)

ISSUES_CREATED = Counter(
    "app_issues_created_total",
    "Issues reported by citizens, partitioned by issue type.",
    ["issue_type"],
)

ISSUE_STATUS_CHANGES = Counter(
    "app_issue_status_changes_total",
    "Successful issue status transitions, partitioned by new status.",
    ["status"],
)


def _normalise_path(request: Request) -> str:
    """Label matched requests with their full path template to keep cardinality low.

    Included routers may leave an un-prefixed route in the scope, so the
    template is rebuilt from the request path by swapping each path
    parameter segment back to its ``{name}`` placeholder.
    """
    path = request.url.path
    if request.scope.get("route") is None:
        return path
    params = request.scope.get("path_params") or {}
    if not params:
        return path
    placeholders = {str(value): "{%s}" % name for name, value in params.items()}
    return "/".join(placeholders.get(segment, segment) for segment in path.split("/"))


def observe_http_request(method: str, path: str, status_code: int, duration: float) -> None:
    """Record metrics for an HTTP request."""
    status_str = str(status_code)
    HTTP_REQUESTS_TOTAL.labels(method=method, path=path, status=status_str).inc()
    HTTP_REQUEST_DURATION.labels(method=method, path=path).observe(duration)

    if status_code >= 400:
        HTTP_REQUEST_ERRORS.labels(method=method, path=path, status=status_str).inc()


def record_issue_created(issue_type: str) -> None:
    """Increment the created-issues counter."""
    ISSUES_CREATED.labels(issue_type=issue_type).inc()


def record_status_change(status: str) -> None:
    """Increment the status-transition counter."""
    ISSUE_STATUS_CHANGES.labels(status=status).inc()


class MetricsMiddleware(BaseHTTPMiddleware):
    """ASGI middleware for capturing request metrics."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        method = request.method
        start = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            duration = time.perf_counter() - start
            observe_http_request(method, _normalise_path(request), 500, duration)
            raise

        duration = time.perf_counter() - start
        observe_http_request(method, _normalise_path(request), response.status_code, duration)
        return response


__all__ = [
    "MetricsMiddleware",
    "HTTP_REQUESTS_TOTAL",
    "HTTP_REQUEST_DURATION",
    "HTTP_REQUEST_ERRORS",
    "ISSUES_CREATED",
    "ISSUE_STATUS_CHANGES",
    "observe_http_request",
    "record_issue_created",
    "record_status_change",
]

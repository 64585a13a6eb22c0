from __future__ import annotations

import logging
import re
import time
from collections.abc import Awaitable, Callable
from uuid import uuid4

from fastapi import Request
from fastapi.responses import Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from ..metrics import REQUEST_COUNT, REQUEST_ERRORS, REQUEST_LATENCY

REQUEST_ID_HEADER = "X-Request-ID"
QUIET_PATHS = frozenset({"/healthz", "/readyz", "/metrics"})
_REQUEST_ID_RE = re.compile(r"[A-Za-z0-9._-]{1,64}")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Emit one structured log line per request and record Prometheus metrics.

    A well-formed inbound ``X-Request-ID`` is reused so that ids stay stable
    across a proxy; otherwise a fresh UUID is assigned. Probe and scrape
    endpoints are logged at DEBUG.
    """

    def __init__(self, app: ASGIApp) -> None:
        super().__init__(app)
        self._logger = logging.getLogger("dreamscape.request")
        if self._logger.level == logging.NOTSET:
            self._logger.setLevel(logging.INFO)

    async def dispatch(  # type: ignore[override]
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        started = time.perf_counter()
        request_id = _incoming_request_id(request) or uuid4().hex
        request.state.request_id = request_id

        try:
            response = await call_next(request)
        except Exception:
            self._finish(request, 500, started, failed=True)
            raise

        self._finish(request, response.status_code, started)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    def _finish(self, request: Request, status: int, started: float, *, failed: bool = False) -> None:
        duration_ms = (time.perf_counter() - started) * 1000
        path = _route_template(request)
        _observe_metrics(request.method, path, status, duration_ms)

        extra = {
            "request_id": request.state.request_id,
            "path": path,
            "method": request.method,
            "status": status,
            "duration_ms": round(duration_ms, 3),
            "user": getattr(request.state, "telemetry_user", None),
        }
        if failed:
            self._logger.error("request failed", extra=extra, exc_info=True)
        elif status >= 500:
            self._logger.error("request complete", extra=extra)
        elif path in QUIET_PATHS:
            self._logger.debug("request complete", extra=extra)
        else:
            self._logger.info("request complete", extra=extra)


def _incoming_request_id(request: Request) -> str | None:
    candidate = request.headers.get(REQUEST_ID_HEADER)
    if candidate and _REQUEST_ID_RE.fullmatch(candidate):
        return candidate
    return None


def _route_template(request: Request) -> str:
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    return str(path) if path else request.url.path


def _observe_metrics(method: str, path: str, status: int, duration_ms: float) -> None:
    status_label = str(status)
    REQUEST_COUNT.labels(method=method, path=path, status=status_label).inc()
    REQUEST_LATENCY.labels(method=method, path=path).observe(duration_ms / 1000)
    if status >= 500:
        REQUEST_ERRORS.labels(method=method, path=path, status=status_label).inc()

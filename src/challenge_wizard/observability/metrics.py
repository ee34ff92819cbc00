from __future__ import annotations

"""Prometheus metrics for the challenge wizard.

Adds an HTTP middleware that records host API latency per method/path/status,
and counters for outbound AI-service calls and channel traffic.
"""

import time
from typing import Callable, Awaitable

from prometheus_client import Counter, Histogram
from starlette.requests import Request
from starlette.responses import Response

# Histogram buckets chosen for web latencies (seconds)
REQUEST_LATENCY = Histogram(
    "challenge_wizard_request_latency_seconds",
    "Host API request latency in seconds",
    labelnames=("method", "path", "status"),
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0),
)

AI_REQUESTS = Counter(
    "challenge_wizard_ai_requests_total",
    "Outbound AI-service calls by endpoint and outcome",
    labelnames=("endpoint", "outcome"),
)

CHANNEL_FRAMES = Counter(
    "challenge_wizard_channel_frames_total",
    "Conversational channel frames by direction",
    labelnames=("direction",),
)


def record_ai_request(endpoint: str, outcome: str) -> None:
    try:
        AI_REQUESTS.labels(endpoint=endpoint, outcome=outcome).inc()
    except Exception:
        # Metrics must never break the wizard
        pass


def record_channel_frame(direction: str) -> None:
    try:
        CHANNEL_FRAMES.labels(direction=direction).inc()
    except Exception:
        pass


def sanitize_path(path: str) -> str:
    """Reduce high-cardinality paths (e.g., /wizard/sessions/{id}) to a coarse label."""
    if not path:
        return "/"
    segs = [s for s in path.split("?")[0].split("/") if s]
    if not segs:
        return "/"
    if segs[0] == "api" and len(segs) > 1:
        return "/api/" + segs[1]
    return "/" + segs[0]


def metrics_middleware_factory() -> Callable[[Request, Callable[[Request], Awaitable[Response]]], Awaitable[Response]]:
    async def middleware(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        # Avoid observing the metrics endpoint itself
        if request.url.path.endswith("/metrics"):
            return await call_next(request)
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start
        try:
            REQUEST_LATENCY.labels(
                method=request.method,
                path=sanitize_path(request.url.path),
                status=str(response.status_code),
            ).observe(elapsed)
        except Exception:
            pass
        return response

    return middleware

"""
Monitoring Middleware and Prometheus instrumentation for DataJeopardy.

Captures request latencies, status codes, classified threats and account
lock transitions.
"""

import time
import logging
from typing import Callable
from fastapi import Request, Response
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

# --- Metrics Definition ---

try:
    # Request Metrics
    REQUEST_COUNT = Counter(
        "api_request_total",
        "Total count of HTTP requests",
        ["method", "path", "status_code"]
    )

    REQUEST_LATENCY = Histogram(
        "api_request_latency_seconds",
        "Latency of HTTP requests in seconds",
        ["method", "path"]
    )

    # Threat Metrics
    THREATS_CLASSIFIED = Counter(
        "threats_classified_total",
        "Submitted queries by resolved threat category",
        ["threat_type", "severity"]
    )

    LOCK_TRANSITIONS = Counter(
        "account_lock_transitions_total",
        "Account status transitions",
        ["transition"]  # auto_lock, manual_lock, manual_unlock
    )
except ValueError:
    # Metrics already registered
    from prometheus_client import REGISTRY
    REQUEST_COUNT = REGISTRY._names_to_collectors["api_request_total"]
    REQUEST_LATENCY = REGISTRY._names_to_collectors["api_request_latency_seconds"]
    THREATS_CLASSIFIED = REGISTRY._names_to_collectors["threats_classified_total"]
    LOCK_TRANSITIONS = REGISTRY._names_to_collectors["account_lock_transitions_total"]


# --- Middleware Implementation ---

class PrometheusMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Don't monitor /metrics itself to avoid noise
        if request.url.path.rstrip("/") == "/metrics":
            return await call_next(request)

        method = request.method
        path = request.url.path
        start_time = time.time()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            latency = time.time() - start_time

            # Record metrics
            REQUEST_COUNT.labels(method=method, path=path, status_code=status_code).inc()
            REQUEST_LATENCY.labels(method=method, path=path).observe(latency)

        return response

# --- Helper functions ---

def get_metrics():
    """Generates the latest metrics scrapable by Prometheus."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

def record_threat(threat_type: str, severity: str):
    THREATS_CLASSIFIED.labels(threat_type=threat_type, severity=severity).inc()

def record_lock_transition(transition: str, count: int = 1):
    """
    Update Prometheus metrics for committed status transitions.
    """
    if count:
        LOCK_TRANSITIONS.labels(transition=transition).inc(count)
        logger.debug(f"Metrics updated: {transition} x{count}")

"""Prometheus metric definitions."""

from prometheus_client import Counter, Histogram, generate_latest
from starlette.responses import Response


http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["service", "route", "method", "status_code"],
)
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration seconds",
    ["service", "route", "method"],
)
payment_intent_requests_total = Counter(
    "payment_intent_requests_total",
    "Total payment intent creation requests",
    ["service", "mode"],
)
payment_intent_outcomes_total = Counter(
    "payment_intent_outcomes_total",
    "Payment intent creation outcomes",
    ["service", "mode", "result"],
)
processor_latency_seconds = Histogram(
    "processor_latency_seconds",
    "Latency of payment processor calls in seconds",
    ["service", "mode"],
)


def metrics_response() -> Response:
    """Expose all registered Prometheus metrics in text format."""

    return Response(content=generate_latest(), media_type="text/plain")

"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Registration metrics
registration_attempts = Counter(
    'registration_attempts_total',
    'Total registration attempts',
    ['outcome']  # created, fully_booked, past_event, duplicate, not_found, invalid
)

admission_latency = Histogram(
    'admission_decision_latency_seconds',
    'Time spent deciding whether a registration is admitted',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

# Expiry sweep metrics
sweep_runs = Counter(
    'expiry_sweep_runs_total',
    'Expiry sweeps executed',
    ['trigger']  # listing, scheduled
)

expired_events_removed = Counter(
    'expired_events_removed_total',
    'Past events deleted by the expiry sweeper'
)

sweep_failures = Counter(
    'expiry_sweep_failures_total',
    'Expired events the sweeper failed to delete or parse'
)


def metrics_endpoint() -> Response:
    """
    Prometheus metrics endpoint.

    Usage:
        @app.get("/metrics")
        def metrics():
            return metrics_endpoint()
    """
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_registration_attempt(outcome: str):
    registration_attempts.labels(outcome=outcome).inc()


def record_sweep(trigger: str, removed: int):
    """Record one sweeper pass and how many events it deleted."""
    sweep_runs.labels(trigger=trigger).inc()
    if removed:
        expired_events_removed.inc(removed)

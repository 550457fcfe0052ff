"""Monitoring and metrics instrumentation for the retrying transport.

Exports Prometheus metrics for operational monitoring and alerting.
"""

from roundtrip_retry.monitoring.metrics import (
    transport_attempts_total,
    transport_drain_errors_total,
    transport_retry_delay_seconds,
)

__all__ = [
    "transport_attempts_total",
    "transport_drain_errors_total",
    "transport_retry_delay_seconds",
]

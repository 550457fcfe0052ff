"""Prometheus metrics for the retrying transport.

The embedding application exposes these through its own /metrics endpoint.
Alert rules worth configuring:
- transport_attempts_total{decision="abort"} (policies giving up)
- transport_attempts_total{decision="retry"} (upstream instability)
- transport_drain_errors_total (connections not being reused)
"""

from prometheus_client import Counter, Histogram

# === Attempt Metrics ===

transport_attempts_total = Counter(
    "transport_attempts_total",
    "Total round-trip attempts by HTTP method and retryer decision",
    ["method", "decision"],
)
"""
Attempts counter by method and decision.

Labels:
- method: GET, POST, ...
- decision: ignore (final outcome), retry (rejected, sent again), abort (given up)
"""

# === Connection Reuse Metrics ===

transport_drain_errors_total = Counter(
    "transport_drain_errors_total",
    "Total failures while draining or closing rejected response bodies",
)

# === Delay Metrics ===

transport_retry_delay_seconds = Histogram(
    "transport_retry_delay_seconds",
    "Time spent in the delay policy between attempts",
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0],
)

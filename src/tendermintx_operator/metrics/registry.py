"""
Operator metrics.

All series live in one private registry and are scraped from `/metrics`.
Heights are gauges, submissions and failures are counters, and each cycle is
timed by a histogram.
"""

from __future__ import annotations

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# No process or platform collectors.
REGISTRY = CollectorRegistry()

# --- chain progress ---

synced_height = Gauge(
    "tmx_synced_height",
    "Latest height accepted by the light client contract",
    registry=REGISTRY,
)

chain_head_height = Gauge(
    "tmx_chain_head_height",
    "Latest height of the source chain",
    registry=REGISTRY,
)

# --- requests ---

requests_submitted = Counter(
    "tmx_requests_submitted_total",
    "Proof requests accepted by the proving network",
    ["kind"],
    registry=REGISTRY,
)

request_failures = Counter(
    "tmx_request_failures_total",
    "Cycles abandoned because of a transient failure",
    ["stage"],
    registry=REGISTRY,
)

# --- loop ---

cycles = Counter(
    "tmx_cycles_total",
    "Completed operator cycles by outcome",
    ["status"],
    registry=REGISTRY,
)

cycle_duration = Histogram(
    "tmx_cycle_duration_seconds",
    "Duration of one check-select-build-submit cycle",
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
    registry=REGISTRY,
)


def generate_metrics() -> bytes:
    """Render every operator series in the Prometheus text exposition format."""
    return generate_latest(REGISTRY)

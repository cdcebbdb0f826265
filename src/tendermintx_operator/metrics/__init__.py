"""Prometheus metrics for the operator loop."""

from .registry import (
    REGISTRY,
    chain_head_height,
    cycle_duration,
    cycles,
    generate_metrics,
    request_failures,
    requests_submitted,
    synced_height,
)

__all__ = [
    "REGISTRY",
    "chain_head_height",
    "cycle_duration",
    "cycles",
    "generate_metrics",
    "request_failures",
    "requests_submitted",
    "synced_height",
]

"""
Status API for the operator.

Provides health, loop status, and Prometheus metrics over HTTP.
"""

from .server import SERVICE_NAME, ApiServer, ApiServerConfig, serve_until_cancelled

__all__ = [
    "SERVICE_NAME",
    "ApiServer",
    "ApiServerConfig",
    "serve_until_cancelled",
]

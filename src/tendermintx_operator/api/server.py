"""
Status API server for the operator loop.

Provides HTTP endpoints for:
- /tmx/v0/health - Liveness check
- /tmx/v0/status - Outcome of the most recent loop cycle
- /metrics - Prometheus metrics endpoint

The server is read-only: it reports on the loop and never drives it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from aiohttp import web
from prometheus_client import CONTENT_TYPE_LATEST

from tendermintx_operator.metrics import generate_metrics
from tendermintx_operator.operator import CycleOutcome

logger = logging.getLogger(__name__)

SERVICE_NAME = "tendermintx-operator"


def _no_outcome() -> CycleOutcome | None:
    """Getter used when the server runs without a loop."""
    return None


async def _handle_health(_request: web.Request) -> web.Response:
    """Liveness probe."""
    return web.json_response({"status": "healthy", "service": SERVICE_NAME})


async def _handle_metrics(_request: web.Request) -> web.Response:
    """Scrape target for the operator registry."""
    return web.Response(body=generate_metrics(), headers={"Content-Type": CONTENT_TYPE_LATEST})


@dataclass(frozen=True, slots=True)
class ApiServerConfig:
    """Bind address and on/off switch for the status server."""

    host: str = "0.0.0.0"
    port: int = 9464
    """Shared by the status routes and the metrics scrape."""

    enabled: bool = True


@dataclass(slots=True)
class ApiServer:
    """Read-only aiohttp server reporting what the operator loop last did."""

    config: ApiServerConfig
    outcome_getter: Callable[[], CycleOutcome | None] = _no_outcome
    """Usually the bound `last_outcome` of a running Operator."""

    _runner: web.AppRunner | None = field(default=None, init=False)
    _site: web.TCPSite | None = field(default=None, init=False)

    def create_app(self) -> web.Application:
        """Application with the health, status and metrics routes."""
        app = web.Application()
        app.add_routes(
            [
                web.get("/tmx/v0/health", _handle_health),
                web.get("/tmx/v0/status", self._handle_status),
                web.get("/metrics", _handle_metrics),
            ]
        )
        return app

    async def start(self) -> None:
        """Bind and start serving. Does nothing when disabled."""
        if not self.config.enabled:
            logger.info("API server is disabled")
            return

        self._runner = web.AppRunner(self.create_app())
        await self._runner.setup()

        self._site = web.TCPSite(self._runner, self.config.host, self.config.port)
        await self._site.start()

        logger.info("API server listening on %s:%d", self.config.host, self.config.port)

    async def stop(self) -> None:
        """Close the listener and release the runner."""
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
            self._site = None
            logger.info("API server stopped")

    @property
    def is_running(self) -> bool:
        """True between a successful start and stop."""
        return self._runner is not None

    async def _handle_status(self, _request: web.Request) -> web.Response:
        """`{"status": "starting"}` until the first cycle ends, then the last CycleOutcome."""
        outcome = self.outcome_getter()
        if outcome is None:
            return web.json_response({"status": "starting"})
        return web.json_response(outcome.to_json())


async def serve_until_cancelled(server: ApiServer) -> None:
    """Run the server until the surrounding task is cancelled."""
    await server.start()
    try:
        await asyncio.Event().wait()
    finally:
        await server.stop()

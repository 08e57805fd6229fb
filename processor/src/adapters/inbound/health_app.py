"""
FastAPI health surface - liveness, readiness and metrics for the worker.
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse, PlainTextResponse

from processor.src.infrastructure.observability import WorkerMetrics

logger = logging.getLogger(__name__)

APP_VERSION = "0.1.0"


class ReadinessState:
    """Readiness flag owned by the health surface. Safe to flip from any thread."""

    def __init__(self, ready: bool = False) -> None:
        self._flag = threading.Event()
        if ready:
            self._flag.set()

    @property
    def ready(self) -> bool:
        return self._flag.is_set()

    def set_ready(self, ready: bool) -> None:
        if ready:
            self._flag.set()
        else:
            self._flag.clear()
        logger.info("Worker marked as %s", "ready" if ready else "not ready")


def create_health_app(
    readiness: ReadinessState,
    metrics: Optional[WorkerMetrics] = None,
) -> FastAPI:
    app = FastAPI(
        title="Frame Processor Worker",
        description="Health and metrics endpoints for the frame extraction worker",
        version=APP_VERSION,
    )
    app.state.readiness = readiness
    app.state.metrics = metrics or WorkerMetrics()

    @app.get("/health", response_class=PlainTextResponse)
    async def health():
        return "OK"

    @app.get("/ready", response_class=PlainTextResponse)
    async def ready():
        if readiness.ready:
            return PlainTextResponse("READY")
        return PlainTextResponse("NOT READY", status_code=503)

    @app.get("/processor/health/liveness")
    async def liveness():
        return {"status": "alive"}

    @app.get("/processor/health/readiness")
    async def readiness_probe():
        if readiness.ready:
            return {"status": "ready"}
        return JSONResponse({"status": "not_ready"}, status_code=503)

    @app.get("/metrics")
    async def metrics_snapshot():
        return {"version": APP_VERSION, **app.state.metrics.snapshot()}

    return app


class _EmbeddedServer(uvicorn.Server):
    """uvicorn server that leaves signal handling to the worker process."""

    def install_signal_handlers(self) -> None:
        return None

    @contextlib.contextmanager
    def capture_signals(self):
        yield


class HealthServer:
    """Serves the health app as a background task on the worker's event loop."""

    def __init__(self, app: FastAPI, host: str = "0.0.0.0", port: int = 8080) -> None:
        config = uvicorn.Config(app, host=host, port=port, log_level="warning", lifespan="off")
        self._server = _EmbeddedServer(config)
        self._task: Optional[asyncio.Task[None]] = None
        self._host = host
        self._port = port

    async def start(self) -> None:
        self._task = asyncio.get_running_loop().create_task(self._server.serve())
        logger.info("Health server listening on %s:%d", self._host, self._port)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._server.should_exit = True
        await self._task
        self._task = None
        logger.info("Health server stopped")

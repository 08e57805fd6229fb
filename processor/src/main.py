"""
Worker entry point.
Loads settings, wires the container, serves the health endpoints and runs
the intake loop until SIGINT or SIGTERM.
"""
from __future__ import annotations

import asyncio
import logging
import signal
from typing import Optional

from processor.src.adapters.inbound.health_app import HealthServer
from processor.src.core.exceptions import ConfigurationError
from processor.src.infrastructure.config import Settings
from processor.src.infrastructure.container import ApplicationContainer
from processor.src.infrastructure.logging_config import setup_logging

logger = logging.getLogger(__name__)


def _install_signal_handlers(stop) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop)
        except NotImplementedError:
            # Windows event loops do not support add_signal_handler.
            signal.signal(sig, lambda *_: loop.call_soon_threadsafe(stop))


async def run_worker(settings: Settings, container: Optional[ApplicationContainer] = None) -> None:
    container = container or ApplicationContainer(settings)
    intake = container.intake_loop()
    readiness = container.readiness()

    health_server: Optional[HealthServer] = None
    if settings.health.enabled:
        health_server = HealthServer(
            container.health_app(), host=settings.health.host, port=settings.health.port
        )
        await health_server.start()

    _install_signal_handlers(intake.stop)

    logger.info("Worker initialized successfully")
    logger.info("Input Queue: %s", settings.queue.input or settings.queue.backend)
    logger.info("Output Queue: %s", settings.notification_destination)
    logger.info("Output Bucket: %s", settings.storage.output)

    readiness.set_ready(True)
    try:
        await intake.run()
    finally:
        readiness.set_ready(False)
        if health_server is not None:
            await health_server.stop()


def main() -> None:
    settings = Settings()
    setup_logging(settings.logging.level, settings.logging.format)
    logger.info("Starting Video Processor Worker")

    try:
        settings.validate_required()
    except ConfigurationError as exc:
        logger.error("Environment validation failed: %s", exc)
        raise SystemExit(1) from exc

    asyncio.run(run_worker(settings))


if __name__ == "__main__":
    main()

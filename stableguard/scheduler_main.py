"""
Scheduler Entry Point — runs in a separate container.

Usage:
    python -m stableguard.scheduler_main

This does NOT run a web server. It runs the APScheduler background loop
for the health check, regulatory scan and safeguard triggers.
"""

import asyncio
import signal

import structlog

from stableguard.config import settings
from stableguard.log_setup import configure_logging
from stableguard.scheduler import ComplianceScheduler
from stableguard.workflows.health_check import run_health_check

logger = structlog.get_logger(__name__)


async def main():
    """Initialize and run the scheduler."""
    configure_logging(settings)
    logger.info("scheduler_starting", version=settings.app_version, ledger_mode=settings.ledger_mode)

    scheduler = ComplianceScheduler(settings)

    # Run one health check on startup
    logger.info("running_initial_health_check")
    await scheduler.run_job("health_check", run_health_check)

    scheduler.start()

    stop_event = asyncio.Event()

    def _handle_signal(signum, frame):
        logger.info("shutdown_signal_received", signal=signum)
        stop_event.set()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    logger.info("scheduler_running", msg="Waiting for jobs... Ctrl+C to stop.")
    await stop_event.wait()

    scheduler.stop()
    logger.info("scheduler_shutdown_complete")


def run():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()

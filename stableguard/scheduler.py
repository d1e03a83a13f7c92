"""
Compliance Scheduler — runs in its own process, not inside the API.

Jobs (cron schedules from settings):
1. Reserve health check (every 10 minutes): publish one report per coin
2. Regulatory scan (every 6 hours): flag new regulatory obligations
3. Safeguard evaluation (every 30 minutes): poke the safeguard controller

max_instances=1 keeps a trigger from overlapping itself. Each run builds a
fresh InvocationContext; only the dedup store and ledger client are shared.
"""

from typing import Awaitable, Callable, Optional

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from stableguard.alerting.dedup import InMemoryDedupStore
from stableguard.config import Settings
from stableguard.workflows.context import InvocationContext, build_context, build_ledger
from stableguard.workflows.health_check import run_health_check
from stableguard.workflows.regulatory import run_regulatory_scan
from stableguard.workflows.safeguard import run_safeguard

logger = structlog.get_logger(__name__)

Handler = Callable[[InvocationContext], Awaitable[str]]


class ComplianceScheduler:
    """Background scheduler for the periodic triggers."""

    def __init__(
        self,
        settings: Settings,
        context_factory: Optional[Callable[[], InvocationContext]] = None,
    ):
        self.settings = settings
        if context_factory is None:
            dedup = InMemoryDedupStore()
            ledger = build_ledger(settings)

            def context_factory() -> InvocationContext:
                return build_context(settings, dedup=dedup, ledger=ledger)

        self.context_factory = context_factory
        self.scheduler = AsyncIOScheduler()

    def jobs(self) -> list[tuple[str, str, Handler]]:
        return [
            ("health_check", self.settings.health_check_schedule, run_health_check),
            ("regulatory_scan", self.settings.regulatory_scan_schedule, run_regulatory_scan),
            ("safeguard", self.settings.safeguard_schedule, run_safeguard),
        ]

    def start(self):
        """Register and start all scheduled jobs."""
        for job_id, schedule, handler in self.jobs():
            self.scheduler.add_job(
                self.run_job,
                CronTrigger.from_crontab(schedule, timezone="UTC"),
                args=[job_id, handler],
                id=job_id,
                max_instances=1,
                coalesce=True,
                replace_existing=True,
            )
        self.scheduler.start()
        logger.info("compliance_scheduler_started", jobs=[j for j, _, _ in self.jobs()])

    def stop(self):
        """Gracefully stop the scheduler."""
        self.scheduler.shutdown(wait=True)
        logger.info("compliance_scheduler_stopped")

    async def run_job(self, job_id: str, handler: Handler) -> str:
        """
        Run one trigger invocation.

        Handlers return status strings. Anything they raise is logged here so
        the scheduler loop keeps going.
        """
        try:
            status = await handler(self.context_factory())
        except Exception as e:
            logger.error("scheduled_job_failed", job=job_id, error=str(e))
            return f"error:{job_id}:{e}"
        logger.info("scheduled_job_completed", job=job_id, status=status)
        return status

"""Daily reset of conversation memory on a cron schedule."""

from __future__ import annotations

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from loguru import logger

from zap_agent.config.schema import MemoryConfig
from zap_agent.routing.memory import ConversationMemory

JOB_ID = "memory_daily_reset"


def build_trigger(cron: str, timezone: str = "local") -> CronTrigger:
    """Parse a five-field crontab expression; "local" keeps the host timezone."""
    if timezone and timezone != "local":
        return CronTrigger.from_crontab(cron, timezone=timezone)
    return CronTrigger.from_crontab(cron)


class DailyResetScheduler:
    """
    Wraps an AsyncIOScheduler with one job that wipes every sender's
    history and domain context.

    The job runs on the gateway's event loop, so a reset can land between
    any two awaits of an in-flight pipeline.
    """

    def __init__(self, memory: ConversationMemory, cron: str = "0 0 * * *", timezone: str = "local"):
        self.memory = memory
        self.cron = cron
        self.timezone = timezone
        self._scheduler: AsyncIOScheduler | None = None

    @classmethod
    def from_config(cls, memory: ConversationMemory, config: MemoryConfig) -> DailyResetScheduler:
        return cls(memory, cron=config.reset_cron, timezone=config.timezone)

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self) -> None:
        """Start the scheduler. Must be called with an event loop running."""
        if self.running:
            logger.warning("Daily reset scheduler already running")
            return

        trigger = build_trigger(self.cron, self.timezone)
        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            self.reset,
            trigger=trigger,
            id=JOB_ID,
            name="Clear conversation memory",
            replace_existing=True,
            misfire_grace_time=3600,
            coalesce=True,
        )
        self._scheduler.start()
        logger.info(f"Daily reset scheduled ({self.cron}, tz={self.timezone})")

    def stop(self) -> None:
        """Shut down the scheduler."""
        if self._scheduler is not None and self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Daily reset scheduler stopped")
        self._scheduler = None

    async def reset(self) -> None:
        """Job body: clear all per-sender state."""
        logger.info("Running daily memory reset")
        self.memory.clear_all()

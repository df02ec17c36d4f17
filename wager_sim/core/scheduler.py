from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from wager_sim.core.logger import get_logger
from wager_sim.core.session import SessionCoordinator

logger = get_logger("scheduler")


class CrashScheduler:
    """
    Drives crash rounds forward on the event loop.
    The job is a coroutine so APScheduler runs it on the loop thread, keeping
    every engine transition on one logical thread.
    """

    JOB_ID = "crash_tick"

    def __init__(self, coordinator: SessionCoordinator, interval_ms: int = 100):
        self.coordinator = coordinator
        self.interval_ms = interval_ms
        self.scheduler = AsyncIOScheduler()

    def start(self):
        self.scheduler.add_job(
            self.tick,
            IntervalTrigger(seconds=self.interval_ms / 1000),
            id=self.JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self.scheduler.start()
        logger.info(f"Crash scheduler started ({self.interval_ms}ms ticks)")

    def shutdown(self):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Crash scheduler shutdown")

    async def tick(self):
        result = self.coordinator.tick()
        if result is not None:
            logger.debug(f"Crash round ended: {result.message}")
        return result

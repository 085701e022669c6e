from typing import Awaitable, Callable
from apscheduler.schedulers.asyncio import AsyncIOScheduler
import structlog

logger = structlog.get_logger()

scheduler = AsyncIOScheduler()


def start_scheduler():
    if not scheduler.running:
        scheduler.start()
        logger.info("scheduler_started")


def stop_scheduler():
    if scheduler.running:
        scheduler.shutdown()
        logger.info("scheduler_stopped")


async def safe_run(name: str, fn: Callable[[], Awaitable[object]]):
    """Run a scheduled coroutine, logging instead of raising."""
    try:
        await fn()
    except Exception as e:
        logger.error(f"{name}_job_failed", error=str(e))


def add_interval_job(name: str, fn: Callable[[], Awaitable[object]], seconds: int) -> bool:
    """Register `fn` to run every `seconds`. A non-positive interval disables the job."""
    if seconds <= 0:
        logger.info("job_disabled", job=name)
        return False

    async def _job():
        await safe_run(name, fn)

    scheduler.add_job(_job, "interval", seconds=seconds, id=name, replace_existing=True)
    return True

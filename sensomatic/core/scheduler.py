"""Background job scheduler for advancing hangouts."""
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from sensomatic.core.config import settings
from sensomatic.core.store import get_state
from sensomatic.lifecycle.sweeper import advance_due_hangouts

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


def sweep_job():
    """Background hangout sweep."""
    try:
        stats = advance_due_hangouts(get_state())
        if stats["activated"] or stats["completed"]:
            logger.info(f"Hangout sweep completed: {stats}")
    except Exception as e:
        logger.error(f"Hangout sweep failed: {e}")


def start_scheduler():
    """Start the background scheduler."""
    if not settings.hangout_sweep_enabled:
        logger.info("Hangout sweep disabled, scheduler not started")
        return
    scheduler.add_job(
        sweep_job,
        trigger=IntervalTrigger(seconds=settings.hangout_sweep_interval_seconds),
        id="hangout_sweep",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(
        f"Scheduler started, sweeping hangouts every {settings.hangout_sweep_interval_seconds} seconds"
    )


def shutdown_scheduler():
    """Graceful shutdown."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler shut down")

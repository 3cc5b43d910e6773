"""
Scheduler service for background task housekeeping.

Features:
- Expiry sweep: archive pending tasks nobody reviewed in time
"""
import os
import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from boomerang.db import session as db_session
from boomerang.services.lifecycle import TaskLifecycleController
from boomerang.services.scheduling import LOCAL_TZ
from boomerang.services.task_store import TaskStore
from boomerang.services.errors import BoomerangError

logger = logging.getLogger(__name__)

EXPIRY_SWEEP_MINUTES = int(os.getenv("EXPIRY_SWEEP_MINUTES", "30"))

# Global scheduler instance
scheduler = AsyncIOScheduler(timezone=LOCAL_TZ)


def run_expiry_sweep() -> int:
    """Archive expired pending tasks for every owner. Returns how many were archived."""
    if db_session.SessionLocal is None:
        logger.warning("[Scheduler] Expiry sweep skipped: DATABASE_URL not configured")
        return 0

    db = db_session.SessionLocal()
    try:
        return TaskLifecycleController(TaskStore(db)).archive_expired()
    finally:
        db.close()


async def expire_stale_tasks():
    """Scheduled job wrapper; a failed sweep is retried on the next tick."""
    try:
        run_expiry_sweep()
    except BoomerangError as e:
        logger.error(f"[Scheduler] Expiry sweep error: {e.kind}: {e.message}")


def start_scheduler():
    """Initialize and start the scheduler."""
    scheduler.add_job(
        expire_stale_tasks,
        "interval",
        minutes=EXPIRY_SWEEP_MINUTES,
        id="task_expiry",
        replace_existing=True
    )

    scheduler.start()
    logger.info(f"[Scheduler] Started with expiry sweep every {EXPIRY_SWEEP_MINUTES} min")


def stop_scheduler():
    """Gracefully stop the scheduler."""
    if scheduler.running:
        scheduler.shutdown()
        logger.info("[Scheduler] Stopped")

"""
Background scheduler for competition housekeeping.
Handles:
- Closing competitions whose end date has passed and storing final standings
"""

import logging
from datetime import date
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from taskstreak.database import SessionLocal
from taskstreak.constants import COMPETITION_CHECK_INTERVAL_MINUTES
from taskstreak.services.competition_service import CompetitionService

logger = logging.getLogger("taskstreak.scheduler")

# Create scheduler instance
scheduler = AsyncIOScheduler()


def finalize_competitions(session_factory=SessionLocal, today: Optional[date] = None) -> int:
    """
    Close expired competitions in a fresh session.

    Returns:
        Number of competitions closed
    """
    db = session_factory()
    try:
        closed = CompetitionService(db).finalize_expired_competitions(today)
        if closed:
            logger.info(f"Closed {len(closed)} expired competition(s)")
        return len(closed)
    finally:
        db.close()


def run_competition_finalizer(session_factory=SessionLocal):
    """Job: close expired competitions (runs in the scheduler's thread pool)"""
    try:
        finalize_competitions(session_factory)
    except Exception as e:
        logger.error(f"Scheduler Error (Competitions): {e}")


def start_scheduler():
    """Start the scheduler"""
    if not scheduler.running:
        trigger = CronTrigger(minute=f"*/{COMPETITION_CHECK_INTERVAL_MINUTES}")

        scheduler.add_job(
            run_competition_finalizer,
            trigger,
            id='competition_finalizer',
            replace_existing=True
        )

        scheduler.start()
        logger.info("APScheduler started")
        logger.info(f"Scheduled jobs: {[job.id for job in scheduler.get_jobs()]}")


def stop_scheduler():
    """Stop the scheduler"""
    if scheduler.running:
        scheduler.shutdown()
        logger.info("APScheduler stopped")

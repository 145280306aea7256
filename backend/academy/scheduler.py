"""
Balayage de fin de journée planifié avec APScheduler.

Désactivé par défaut : le balayage est normalement déclenché par POST /api/v1/attendance/end-day.
Avec SWEEP_SCHEDULER_ENABLED, un job cron l'exécute chaque jour à SWEEP_HOUR:SWEEP_MINUTE,
heure locale de l'académie.
"""

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from academy.config import settings
from academy.database import SessionLocal
from academy.services.clock import get_academy_timezone

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "end_of_day_sweep"

scheduler = BackgroundScheduler(timezone=get_academy_timezone())


def _run_end_of_day_sweep() -> None:
    # Import local : attendance_service importe la chaîne complète des services
    from academy.services.attendance_service import end_of_day_sweep

    db = SessionLocal()
    try:
        summary = end_of_day_sweep(db)
        logger.info(
            "Balayage planifié du %s : %d absent(s), %d message(s), %d échec(s)",
            summary.date,
            summary.absent_count,
            summary.notifications_sent,
            len(summary.notification_errors),
        )
    except Exception as exc:
        logger.error("Balayage planifié interrompu : %s", exc, exc_info=True)
    finally:
        db.close()


def start_scheduler() -> None:
    """Programme le balayage quotidien si SWEEP_SCHEDULER_ENABLED est vrai."""
    if not settings.SWEEP_SCHEDULER_ENABLED:
        logger.info("Balayage planifié désactivé.")
        return
    scheduler.add_job(
        _run_end_of_day_sweep,
        trigger="cron",
        hour=settings.SWEEP_HOUR,
        minute=settings.SWEEP_MINUTE,
        id=SWEEP_JOB_ID,
        replace_existing=True,
    )
    scheduler.start()
    logger.info("Balayage planifié chaque jour à %02d:%02d (%s).",
                settings.SWEEP_HOUR, settings.SWEEP_MINUTE, settings.ACADEMY_TIMEZONE)


def stop_scheduler() -> None:
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Balayage planifié arrêté.")

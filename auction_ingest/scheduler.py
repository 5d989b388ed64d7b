# auction_ingest/scheduler.py
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from .config import settings
from .ingest import build_orchestrator
from .utils import logger

scheduler = BackgroundScheduler()

# orchestrator of the scheduled run in flight, so shutdown can interrupt it
current_run = None


def scheduled_run(orchestrator=None):
    global current_run
    orchestrator = orchestrator or build_orchestrator()
    current_run = orchestrator
    try:
        summary = orchestrator.run()
    finally:
        current_run = None
    if summary.aborted:
        logger.error("Scheduled ingestion aborted: %s", summary.error)
    return summary


def start_scheduler(cron=None):
    if scheduler.running:
        return scheduler
    scheduler.add_job(
        scheduled_run,
        CronTrigger.from_crontab(cron or settings.cron),
        id="listing-ingest",
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    scheduler.start()
    logger.info("Scheduler started (cron: %s)", cron or settings.cron)
    return scheduler


def shutdown_scheduler():
    run = current_run
    if run is not None:
        logger.info("Stopping the ingestion run in progress")
        run.request_stop()
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")

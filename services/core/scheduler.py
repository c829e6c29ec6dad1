from apscheduler.schedulers.asyncio import AsyncIOScheduler

from agent_settings import ANALYSIS_CRON_HOURS, PROD_MODE_REVERT_CHECK_SECONDS

# Centralized logging
from logging_config import get_logger

logger = get_logger(__name__)

scheduler = AsyncIOScheduler()


async def revert_expired_prod_mode(service):
    """Persist Prod Mode = off once its window has elapsed"""
    try:
        await service.mode_state.revert_expired_prod_mode()
    except Exception as e:
        logger.error("prod_mode_revert_error", error=str(e)[:200])


async def run_resource_analysis(cycle):
    """Scheduled analysis cycle (AI while Prod Mode is on, heuristics otherwise)"""
    try:
        report = await cycle.run(triggered_by="scheduler")
        logger.info("scheduled_analysis_finished", **report.to_dict())
    except Exception as e:
        logger.error("scheduled_analysis_error", error=str(e)[:200])


def start_scheduler(service, cycle):
    # Prod Mode revert check every few seconds
    scheduler.add_job(
        revert_expired_prod_mode,
        'interval',
        seconds=PROD_MODE_REVERT_CHECK_SECONDS,
        args=[service],
        id='prod_mode_revert',
        replace_existing=True,
        max_instances=1
    )

    # Resource analysis, every 6 hours by default
    scheduler.add_job(
        run_resource_analysis,
        'cron',
        hour=ANALYSIS_CRON_HOURS,
        minute=0,
        args=[cycle],
        id='resource_analysis',
        replace_existing=True,
        max_instances=1
    )

    scheduler.start()
    logger.info("scheduler_started",
               prod_mode_revert=f"every {PROD_MODE_REVERT_CHECK_SECONDS}s",
               resource_analysis=f"cron hour={ANALYSIS_CRON_HOURS}")


def stop_scheduler():
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("scheduler_stopped")

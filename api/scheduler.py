from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from analytics.tasks import archive_daily_metrics, trim_leaderboard
from db.config import settings


def setup_scheduler(scheduler: AsyncIOScheduler):
    """
    Set up the scheduler with the analytics rollup jobs.
    """
    if not settings.disable_analytics_archival_scheduler:
        scheduler.add_job(
            archive_daily_metrics.send,
            CronTrigger.from_crontab(
                settings.analytics_archival_crontab,
                timezone=settings.analytics_timezone,
            ),
            name="archive_daily_metrics",
        )

    if not settings.disable_analytics_trim_scheduler:
        scheduler.add_job(
            trim_leaderboard.send,
            CronTrigger.from_crontab(
                settings.analytics_trim_crontab,
                timezone=settings.analytics_timezone,
            ),
            name="trim_leaderboard",
        )

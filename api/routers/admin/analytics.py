"""Admin API endpoints for content view analytics.

The overview combines today's live Redis counters with the leaderboard; the
daily endpoint reads rows already archived to the database. Rollup jobs can
also be queued by hand, e.g. to re-archive a day after an outage.
"""

import logging
from datetime import date, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel
from sqlmodel.ext.asyncio.session import AsyncSession

from analytics import keys
from analytics.overview import get_overview
from analytics.tasks import archive_daily_metrics, trim_leaderboard
from api.dependencies import require_api_password
from db import crud
from db.database import get_read_session
from db.enums import AnalyticsJob
from db.schemas import DailyStatData, OverviewSnapshot
from utils import const

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/admin/analytics",
    tags=["Analytics"],
    dependencies=[Depends(require_api_password)],
)

DEFAULT_HISTORY_DAYS = 30
MAX_HISTORY_DAYS = 366


class JobQueuedResponse(BaseModel):
    job: AnalyticsJob
    message_id: str
    target_date: date | None = None


@router.get("/overview", response_model=OverviewSnapshot)
async def get_analytics_overview(
    response: Response,
    session: AsyncSession = Depends(get_read_session),
):
    """Today's page views and unique visitors, content counts and top posts."""
    response.headers.update(const.NO_CACHE_HEADERS)
    return await get_overview(session)


@router.get("/daily", response_model=list[DailyStatData])
async def list_daily_stats(
    response: Response,
    start_date: date | None = Query(None, description="First day, inclusive"),
    end_date: date | None = Query(None, description="Last day, inclusive (default: yesterday)"),
    content_id: int | None = Query(None, ge=1),
    session: AsyncSession = Depends(get_read_session),
):
    """Archived daily totals, oldest first. Site-wide rows unless ``content_id`` is given."""
    response.headers.update(const.NO_CACHE_HEADERS)

    end_date = end_date or keys.yesterday()
    start_date = start_date or end_date - timedelta(days=DEFAULT_HISTORY_DAYS - 1)
    if start_date > end_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start_date must not be after end_date.",
        )
    if (end_date - start_date).days >= MAX_HISTORY_DAYS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Date range is limited to {MAX_HISTORY_DAYS} days.",
        )

    rows = await crud.list_daily_stats(session, start_date, end_date, content_id=content_id)
    return [DailyStatData.model_validate(row) for row in rows]


@router.post(
    "/jobs/{job_name}",
    response_model=JobQueuedResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def run_analytics_job(
    job_name: AnalyticsJob,
    response: Response,
    target_date: date | None = Query(None, description="Day to archive (archival only)"),
):
    """Queue a rollup job on the worker outside its schedule."""
    response.headers.update(const.NO_CACHE_HEADERS)

    if job_name == AnalyticsJob.ARCHIVAL:
        if target_date and target_date >= keys.today():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Only past days can be archived.",
            )
        message = archive_daily_metrics.send(target_date.isoformat() if target_date else None)
    else:
        message = trim_leaderboard.send()

    logger.info(f"Queued analytics job {job_name.value} ({message.message_id})")
    return JobQueuedResponse(job=job_name, message_id=message.message_id, target_date=target_date)

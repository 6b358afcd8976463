"""Aggregate statistics endpoints."""

from fastapi import APIRouter, Depends, Query

from hifz.config.app_config import AppConfig
from hifz.core.stats import StatsEngine
from hifz.web.deps import get_config, get_stats, resolve_days
from hifz.web.schemas import AverageMistakesResponse, TrendPoint

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.get("/mistake-distribution", response_model=dict[str, int])
async def mistake_distribution(stats: StatsEngine = Depends(get_stats)) -> dict[str, int]:
    """Percentage of each mistake type (rounded independently)."""
    return stats.get_mistake_type_distribution()


@router.get("/session-days", response_model=dict[str, int])
async def session_days(stats: StatsEngine = Depends(get_stats)) -> dict[str, int]:
    """Session counts per weekday, Sun through Sat."""
    return stats.get_session_count_by_day()


@router.get("/average-mistakes", response_model=AverageMistakesResponse)
async def average_mistakes(stats: StatsEngine = Depends(get_stats)) -> AverageMistakesResponse:
    return AverageMistakesResponse(average=stats.get_average_mistakes_per_session())


@router.get("/mistake-trend", response_model=list[TrendPoint])
async def mistake_trend(
    days: int | None = Query(default=None, ge=1),
    stats: StatsEngine = Depends(get_stats),
    config: AppConfig = Depends(get_config),
) -> list[TrendPoint]:
    """Mistakes per day over the ``days`` days before today, oldest first."""
    return [TrendPoint.from_entity(p) for p in stats.get_mistake_trend(resolve_days(days, config))]

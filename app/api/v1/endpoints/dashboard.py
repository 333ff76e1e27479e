"""Dashboard endpoints."""

from fastapi import APIRouter, Query

from app.core.dependencies import Registry
from app.schemas.dashboard import DashboardStats, StudentRanking
from app.services.dashboard import DashboardService

router = APIRouter()


@router.get("", response_model=DashboardStats)
def get_dashboard(
    registry: Registry,
    ranking_limit: int = Query(10, ge=1, le=100),
):
    """
    Aggregate view over the registry.

    Includes student counts, grade distribution, pass level counts,
    per-unit averages and the top of the rankings.
    """
    return DashboardService(registry).get_dashboard(ranking_limit)


@router.get("/rankings", response_model=list[StudentRanking])
def get_rankings(registry: Registry):
    """All graded students ordered by school total."""
    return DashboardService(registry).get_rankings()

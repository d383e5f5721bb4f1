"""Dashboard API routes — per-user project counts."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db
from app.models.user import User
from app.schemas.dashboard import DashboardStatsResponse
from app.services.project_service import get_project_stats

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStatsResponse, summary="Project counts for the dashboard")
async def get_dashboard_stats(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> DashboardStatsResponse:
    stats = await get_project_stats(db, current_user.id)
    return DashboardStatsResponse(
        total_projects=stats.total,
        completed_projects=stats.completed,
        processing_projects=stats.processing,
        recent_activity=stats.recent,
    )

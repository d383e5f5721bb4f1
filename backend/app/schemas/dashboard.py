"""Dashboard summary schema."""

from app.schemas.base import CamelModel


class DashboardStatsResponse(CamelModel):
    total_projects: int
    completed_projects: int
    processing_projects: int
    recent_activity: int  # projects created in the last 24 hours

from fastapi import APIRouter, Depends

from app.schemas.analytics import DashboardStats
from app.schemas.response import APIResponse
from app.schemas.scope import ScopeContext
from app.services.analytics import AnalyticsService
from app.utils import deps

router = APIRouter()

@router.get("/dashboard", response_model=APIResponse[DashboardStats])
async def get_dashboard(
    context: ScopeContext = Depends(deps.get_scope_context),
    service: AnalyticsService = Depends(deps.get_analytics_service),
):
    """Totals of users, institutes and videos within the caller's scope."""
    dashboard = await service.get_dashboard(context)
    return APIResponse(message="Dashboard statistics retrieved successfully", data=dashboard)

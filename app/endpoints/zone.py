from typing import List
from fastapi import APIRouter, Depends

from app.schemas.response import APIResponse
from app.schemas.scope import ScopeContext
from app.schemas.zone import Zone
from app.services.zone import ZoneService
from app.utils import deps

router = APIRouter()

@router.get("/", response_model=APIResponse[List[Zone]])
async def list_zones(
    context: ScopeContext = Depends(deps.get_scope_context),
    service: ZoneService = Depends(deps.get_zone_service),
):
    zones = await service.list_zones(context)
    return APIResponse(message="Zones retrieved successfully", data=zones)

from app.core.constants import Resource
from app.core.decorators import cached_read
from app.crud.zone import zone as crud_zone
from app.models.zone import Zone
from app.schemas.scope import ScopeContext
from app.schemas.zone import Zone as ZoneSchema
from app.services.base import ScopedService


class ZoneService(ScopedService):
    resource = Resource.ZONES
    crud = crud_zone
    label = "Zone"

    @cached_read("public", Resource.ZONES, "list")
    def list_zones(self, context: ScopeContext):
        zones = self.scoped_query(context).order_by(Zone.name.asc()).all()
        return [ZoneSchema.model_validate(z) for z in zones]

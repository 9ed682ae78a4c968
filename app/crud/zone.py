from pydantic import BaseModel

from app.crud.base import CRUDBase
from app.models.zone import Zone


class CRUDZone(CRUDBase[Zone, BaseModel, BaseModel]):
    search_fields = ("name",)


zone = CRUDZone(Zone)

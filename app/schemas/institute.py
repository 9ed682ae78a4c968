from pydantic import BaseModel, ConfigDict, EmailStr, field_validator
from typing import Optional, Dict
from datetime import datetime

from app.core.constants import StatusEnum

class InstituteBase(BaseModel):
    name: str
    code: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None

class InstituteCreate(InstituteBase):
    zone_id: Optional[int] = None

    @field_validator("name")
    def name_not_empty(cls, v):
        if not v or not v.strip():
            raise ValueError("Institute name cannot be empty")
        return v.strip()

class InstituteUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    status: Optional[StatusEnum] = None

    model_config = ConfigDict(use_enum_values=True)

class Institute(InstituteBase):
    id: int
    zone_id: Optional[int] = None
    zone_name: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class InstituteStats(BaseModel):
    total_institutes: int
    active_institutes: int
    by_status: Dict[str, int]
    total_users: int

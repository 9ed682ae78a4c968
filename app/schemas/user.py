from pydantic import BaseModel, EmailStr, field_validator, ConfigDict, model_validator
from typing import Optional, Any, Dict
from datetime import date, datetime

from app.core.constants import RoleEnum, StatusEnum, GenderEnum

class UserBase(BaseModel):
    """Base user schema with common fields."""
    first_name: str
    last_name: Optional[str] = None
    email: EmailStr
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[GenderEnum] = None

    model_config = ConfigDict(use_enum_values=True)

class UserCreate(UserBase):
    """Schema for creating a user inside an institute."""
    role: RoleEnum = RoleEnum.STUDENT
    institute_id: Optional[int] = None
    zone_id: Optional[int] = None
    parent_id: Optional[int] = None

    @field_validator("first_name")
    def not_empty(cls, v):
        if not v or not v.strip():
            raise ValueError("First name cannot be empty")
        return v.strip()

class UserUpdate(BaseModel):
    """Schema for updating a user's profile."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[GenderEnum] = None
    status: Optional[StatusEnum] = None

    model_config = ConfigDict(use_enum_values=True)

    @field_validator("first_name")
    def not_empty(cls, v):
        if v is not None and not v.strip():
            raise ValueError("First name cannot be empty")
        return v

    @model_validator(mode='before')
    @classmethod
    def at_least_one_value(cls, data: Any):
        if isinstance(data, dict) and not any(v is not None for v in data.values()):
            raise ValueError("At least one field must be provided for update")
        return data

class User(UserBase):
    """Main user schema for reading user data."""
    id: int
    role: str
    status: str
    is_active: bool
    institute_id: Optional[int] = None
    institute_name: Optional[str] = None
    zone_id: Optional[int] = None
    zone_name: Optional[str] = None
    parent_id: Optional[int] = None
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class UserStats(BaseModel):
    total_users: int
    active_users: int
    by_role: Dict[str, int]
    by_status: Dict[str, int]

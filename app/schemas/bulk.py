from pydantic import BaseModel, Field, field_validator
from typing import List

class BulkRequest(BaseModel):
    ids: List[int] = Field(..., min_length=1, max_length=500)
    allow_partial: bool = False

    @field_validator("ids")
    def positive_ids(cls, v):
        if any(i <= 0 for i in v):
            raise ValueError("IDs must be positive integers")
        return v

class BulkStatusUpdate(BulkRequest):
    is_active: bool

class BulkResult(BaseModel):
    processed_count: int
    valid_ids: List[int]
    invalid_ids: List[int]
    invalid_count: int

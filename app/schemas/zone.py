from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

class Zone(BaseModel):
    id: int
    name: str
    status: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

from pydantic import BaseModel
from typing import Dict

class DashboardStats(BaseModel):
    total_users: int
    active_users: int
    users_by_role: Dict[str, int]
    total_institutes: int
    total_videos: int
    active_videos: int

# selfanypay/schemas/home_schema.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from selfanypay.models.project import ProjectStatus
from selfanypay.schemas.common_schema import UserSummary


class PublicProjectRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: Optional[str] = None
    project_image_url: Optional[str] = None
    status: ProjectStatus
    total_budget: float
    completion_percentage: float
    start_date: Optional[datetime] = None
    delivery_date: Optional[datetime] = None
    created_at: datetime
    owner: UserSummary


class PublicProjectsResponse(BaseModel):
    message: str
    data: List[PublicProjectRead]

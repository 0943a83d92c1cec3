# selfanypay/schemas/milestone_schema.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from selfanypay.schemas.common_schema import GalleryItemInput, GalleryItemRead, parse_datetime


# --------- One create/update/delete directive for project -> milestones ---------
class MilestoneItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    action: Optional[str] = None
    id: Optional[str] = None

    title: Optional[str] = None
    release_percentage: Optional[float] = Field(default=None, allow_inf_nan=False)
    due_date: Optional[datetime] = None
    release_date: Optional[datetime] = None
    description: Optional[str] = None

    gallery_items: List[GalleryItemInput] = Field(default_factory=list)

    @field_validator("due_date", "release_date", mode="before")
    def parse_dates(cls, value):
        return parse_datetime(value)


# --------- Pentru READ ----------
class MilestoneRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    title: str
    description: Optional[str] = None
    release_percentage: float
    due_date: datetime
    release_date: Optional[datetime] = None
    created_at: datetime
    gallery_items: List[GalleryItemRead] = []

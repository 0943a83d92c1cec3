# selfanypay/schemas/task_schema.py

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from selfanypay.schemas.common_schema import (
    GalleryItemInput,
    GalleryItemRead,
    UserSummary,
    parse_datetime,
)


# --------- One create/update/delete directive for milestone -> tasks ---------
class TaskItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    action: Optional[str] = None
    id: Optional[str] = None

    contributor_id: Optional[str] = None
    title: Optional[str] = None
    priority: Optional[str] = None    # "low" / "medium" / "high"
    description: Optional[str] = None
    percentage_of_project: Optional[float] = Field(default=None, allow_inf_nan=False)
    percentage_to_release: Optional[float] = Field(default=None, allow_inf_nan=False)
    due_date: Optional[datetime] = None
    release_date: Optional[datetime] = None

    gallery_items: List[GalleryItemInput] = Field(default_factory=list)

    @field_validator("due_date", "release_date", mode="before")
    def parse_dates(cls, value):
        return parse_datetime(value)


class TaskContributorRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    role: Optional[str] = None
    user: Optional[UserSummary] = None


# --------- Pentru READ (răspunsuri) ----------
class TaskRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    milestone_id: str
    contributor_id: str
    title: str
    priority: Optional[str] = None
    description: Optional[str] = None
    percentage_of_project: float
    percentage_to_release: float
    due_date: datetime
    release_date: Optional[datetime] = None
    created_at: datetime
    gallery_items: List[GalleryItemRead] = []


class TaskWithContributorRead(TaskRead):
    contributor: Optional[TaskContributorRead] = None


class MilestoneTasksRead(BaseModel):
    milestone: str
    tasks: List[TaskWithContributorRead]


class TaskDeletedResponse(BaseModel):
    message: str
    task_id: str

# selfanypay/schemas/project_schema.py

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from selfanypay.models.project import ProjectStatus
from selfanypay.schemas.common_schema import UserSummary, parse_datetime


# --------- One create/update/delete directive for project -> contributors ---------
class ContributorItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    action: Optional[str] = None
    id: Optional[str] = None

    user_id: Optional[str] = None
    role: Optional[str] = None
    budget_percentage: Optional[float] = Field(default=None, allow_inf_nan=False)
    release_percentage: Optional[float] = Field(default=None, allow_inf_nan=False)


# --------- For creating a project (POST) ---------
class ProjectCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    is_public: bool = False
    total_budget: float = Field(..., gt=0, allow_inf_nan=False)
    start_date: datetime
    delivery_date: datetime
    contract_clauses: str = Field(..., min_length=1)
    funds_rule: bool = False
    project_image_url: Optional[str] = None
    contributor_ids: List[str] = []

    @field_validator("start_date", "delivery_date", mode="before")
    def parse_dates(cls, value):
        return parse_datetime(value)


# --------- For managing an escrow project (PATCH) ---------
class ManageProjectRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    is_public: Optional[bool] = None
    status: Optional[ProjectStatus] = None
    total_budget: Optional[float] = Field(default=None, allow_inf_nan=False)
    start_date: Optional[datetime] = None
    delivery_date: Optional[datetime] = None
    contract_clauses: Optional[str] = None
    funds_rule: Optional[bool] = None
    receive_email_notifications: Optional[bool] = None
    project_image_url: Optional[str] = None
    is_deleted: Optional[bool] = None

    # raw items; shape is checked by the mutation processor
    contributors: Optional[List[dict]] = None

    @field_validator("start_date", "delivery_date", mode="before")
    def parse_dates(cls, value):
        return parse_datetime(value)


# --------- For reading a project (GET responses) ---------
class ContributorRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    user_id: str
    role: Optional[str] = None
    budget_percentage: float
    release_percentage: Optional[float] = None
    created_at: datetime


class ContributorWithUserRead(ContributorRead):
    user: UserSummary


class ProjectSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str


class GeneralContributorRead(ContributorRead):
    user: UserSummary
    project: ProjectSummary
    headline: Optional[str] = None
    country: Optional[str] = None
    last_active: Optional[datetime] = None


class ProjectRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_id: str
    title: str
    description: Optional[str] = None
    project_image_url: Optional[str] = None
    is_public: bool
    status: ProjectStatus
    is_escrowed: bool
    total_budget: float
    amount_released: float
    amount_pending: float
    completion_percentage: float
    funds_rule: bool
    contract_clauses: Optional[str] = None
    start_date: Optional[datetime] = None
    delivery_date: Optional[datetime] = None
    receive_email_notifications: bool
    is_deleted: bool
    created_at: datetime
    updated_at: Optional[datetime] = None


class ProjectWithContributorsRead(ProjectRead):
    contributors: List[ContributorRead] = []


class ProjectDetailsRead(ProjectRead):
    owner: UserSummary
    contributors: List[ContributorWithUserRead] = []


class OwnedProjectRead(ProjectRead):
    contributor_count: int = 0


class ContributingProjectRead(ProjectRead):
    owner: UserSummary


class EscrowActivatedResponse(BaseModel):
    message: str
    project: ProjectRead

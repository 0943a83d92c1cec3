# selfanypay/project/project_router.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from selfanypay.auth.security import get_current_user
from selfanypay.database import get_db
from selfanypay.errors import ServiceError, to_http_exception
from selfanypay.models.contributor import Contributor
from selfanypay.models.user import User
from selfanypay.project import project_service
from selfanypay.schemas.project_schema import (
    ContributingProjectRead,
    ContributorWithUserRead,
    EscrowActivatedResponse,
    GeneralContributorRead,
    ManageProjectRequest,
    OwnedProjectRead,
    ProjectCreate,
    ProjectDetailsRead,
    ProjectRead,
    ProjectWithContributorsRead,
)

router = APIRouter(prefix="/projects", tags=["projects"])

RECENT_LIMIT = 5


def _check_limit(limit: int) -> None:
    if limit <= 0:
        raise HTTPException(status_code=400, detail={"message": "Limit must be a positive integer."})


def _general_contributor(contributor: Contributor) -> dict:
    data = ContributorWithUserRead.model_validate(contributor).model_dump()
    biodata = contributor.user.biodata
    data.update(
        project={"id": contributor.project.id, "title": contributor.project.title},
        headline=biodata.headline if biodata else None,
        country=biodata.country if biodata else None,
        last_active=contributor.user.last_active,
    )
    return data


# ================= CREATE =================
@router.post("/", status_code=201, response_model=ProjectWithContributorsRead)
def create_project(
    data: ProjectCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        return project_service.create_project(db, owner_id=current_user.id, data=data)
    except ServiceError as exc:
        raise to_http_exception(exc)


# ================= LISTS =================
@router.get("/", response_model=List[OwnedProjectRead])
def get_owned_projects(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    rows = project_service.fetch_user_owned_projects(db, user_id=current_user.id)
    return [
        {**ProjectRead.model_validate(project).model_dump(), "contributor_count": count}
        for project, count in rows
    ]


@router.get("/contributing", response_model=List[ContributingProjectRead])
def get_contributing_projects(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return project_service.fetch_user_contributor_projects(db, user_id=current_user.id)


@router.get("/contributors", response_model=List[GeneralContributorRead])
def get_general_contributors(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    contributors = project_service.fetch_general_contributors(db, owner_id=current_user.id)
    return [_general_contributor(c) for c in contributors]


@router.get("/contributors/recent", response_model=List[GeneralContributorRead])
def get_recent_general_contributors(
    limit: int = RECENT_LIMIT,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    _check_limit(limit)
    contributors = project_service.fetch_recent_general_contributors(
        db, owner_id=current_user.id, limit=limit
    )
    return [_general_contributor(c) for c in contributors]


# ================= SINGLE PROJECT =================
@router.get("/{project_id}/details", response_model=ProjectDetailsRead)
def get_project_details(
    project_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        return project_service.get_project_details(db, project_id=project_id)
    except ServiceError as exc:
        raise to_http_exception(exc)


@router.get("/{project_id}/contributors", response_model=List[ContributorWithUserRead])
def get_project_contributors(
    project_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return project_service.fetch_all_contributors(db, project_id=project_id)


@router.get("/{project_id}/contributors/recent", response_model=List[ContributorWithUserRead])
def get_recent_project_contributors(
    project_id: str,
    limit: int = RECENT_LIMIT,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    _check_limit(limit)
    return project_service.fetch_recently_added_contributors(
        db, project_id=project_id, limit=limit
    )


@router.patch("/{project_id}/manage", response_model=ProjectWithContributorsRead)
def manage_project(
    project_id: str,
    changes: ManageProjectRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        return project_service.manage_escrow_project(
            db, project_id=project_id, user_id=current_user.id, changes=changes
        )
    except ServiceError as exc:
        raise to_http_exception(exc, concurrency_status=400)


@router.patch("/{project_id}/escrow-activate", response_model=EscrowActivatedResponse)
def activate_escrow(
    project_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        project = project_service.make_project_escrow(db, project_id=project_id)
    except ServiceError as exc:
        raise to_http_exception(exc)
    return {"message": "Project successfully marked as escrow-enabled.", "project": project}

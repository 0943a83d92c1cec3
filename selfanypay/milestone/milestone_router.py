# selfanypay/milestone/milestone_router.py
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile
from sqlalchemy.orm import Session

from selfanypay.auth.security import get_current_user
from selfanypay.database import get_db
from selfanypay.errors import ServiceError, to_http_exception
from selfanypay.escrow.mutation import MILESTONES
from selfanypay.escrow.uploads import prepare_item_uploads
from selfanypay.milestone import milestone_service
from selfanypay.models.user import User
from selfanypay.schemas.milestone_schema import MilestoneRead
from selfanypay.utils.uploader import CloudinaryUploader, get_uploader

router = APIRouter(prefix="/milestones", tags=["milestones"])


def _form_item(**values) -> dict:
    # unsent form fields stay out of the item so updates touch only what was sent
    return {name: value for name, value in values.items() if value is not None}


def _run(
    db: Session,
    uploader: CloudinaryUploader,
    *,
    project_id: str,
    user: User,
    item: dict,
    image: Optional[List[UploadFile]],
    file: Optional[List[UploadFile]],
    response: Response,
):
    try:
        milestone_service.require_project(db, project_id)
        item["gallery_items"] = prepare_item_uploads(
            item,
            MILESTONES,
            uploader,
            project_id=project_id,
            user_id=user.id,
            images=image,
            files=file,
        )
        managed = milestone_service.manage_project_milestones(
            db, project_id=project_id, user_id=user.id, items=[item]
        )
    except ServiceError as exc:
        raise to_http_exception(exc)

    if managed.action == "delete":
        return Response(status_code=204)
    if managed.action == "create":
        response.status_code = 201
    return managed.milestone


# ================= ROUTES =================
@router.get("/{project_id}", response_model=List[MilestoneRead])
def get_project_milestones(
    project_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        project = milestone_service.fetch_project_milestones(db, project_id=project_id)
    except ServiceError as exc:
        raise to_http_exception(exc)
    return project.milestones


@router.post("/{project_id}/create", status_code=201, response_model=MilestoneRead)
def create_milestone(
    project_id: str,
    response: Response,
    title: Optional[str] = Form(None),
    release_percentage: Optional[str] = Form(None),
    due_date: Optional[str] = Form(None),
    release_date: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    image: Optional[List[UploadFile]] = File(None),
    file: Optional[List[UploadFile]] = File(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    uploader: CloudinaryUploader = Depends(get_uploader),
):
    item = _form_item(
        action="create",
        title=title,
        release_percentage=release_percentage,
        due_date=due_date,
        release_date=release_date,
        description=description,
    )
    return _run(
        db,
        uploader,
        project_id=project_id,
        user=current_user,
        item=item,
        image=image,
        file=file,
        response=response,
    )


@router.patch(
    "/{project_id}/manage",
    response_model=MilestoneRead,
    responses={201: {"model": MilestoneRead}, 204: {"description": "Milestone deleted"}},
)
def manage_milestone(
    project_id: str,
    response: Response,
    action: Optional[str] = Form(None),
    id: Optional[str] = Form(None),
    title: Optional[str] = Form(None),
    release_percentage: Optional[str] = Form(None),
    due_date: Optional[str] = Form(None),
    release_date: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    image: Optional[List[UploadFile]] = File(None),
    file: Optional[List[UploadFile]] = File(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    uploader: CloudinaryUploader = Depends(get_uploader),
):
    item = _form_item(
        action=action,
        id=id,
        title=title,
        release_percentage=release_percentage,
        due_date=due_date,
        release_date=release_date,
        description=description,
    )
    return _run(
        db,
        uploader,
        project_id=project_id,
        user=current_user,
        item=item,
        image=image,
        file=file,
        response=response,
    )

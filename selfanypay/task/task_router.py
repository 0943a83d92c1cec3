# selfanypay/task/task_router.py
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile
from sqlalchemy.orm import Session

from selfanypay.auth.security import get_current_user
from selfanypay.database import get_db
from selfanypay.errors import ServiceError, to_http_exception
from selfanypay.escrow.mutation import TASKS
from selfanypay.escrow.uploads import prepare_item_uploads
from selfanypay.models.user import User
from selfanypay.schemas.task_schema import (
    MilestoneTasksRead,
    TaskDeletedResponse,
    TaskWithContributorRead,
)
from selfanypay.task import task_service
from selfanypay.utils.uploader import CloudinaryUploader, get_uploader

router = APIRouter(prefix="/tasks", tags=["tasks"])


# ================= ROUTES =================
@router.get("/milestones/{milestone_id}", response_model=MilestoneTasksRead)
def get_milestone_tasks(
    milestone_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        milestone = task_service.fetch_milestone_tasks(db, milestone_id=milestone_id)
    except ServiceError as exc:
        raise to_http_exception(exc)
    return {"milestone": milestone.id, "tasks": milestone.tasks}


@router.post(
    "/projects/{project_id}/milestones/{milestone_id}",
    response_model=TaskWithContributorRead,
    responses={201: {"model": TaskWithContributorRead}, 204: {"description": "Task deleted"}},
)
def manage_task(
    project_id: str,
    milestone_id: str,
    response: Response,
    action: Optional[str] = Form(None),
    id: Optional[str] = Form(None),
    contributor_id: Optional[str] = Form(None),
    title: Optional[str] = Form(None),
    priority: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    percentage_of_project: Optional[str] = Form(None),
    percentage_to_release: Optional[str] = Form(None),
    due_date: Optional[str] = Form(None),
    release_date: Optional[str] = Form(None),
    image: Optional[List[UploadFile]] = File(None),
    file: Optional[List[UploadFile]] = File(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    uploader: CloudinaryUploader = Depends(get_uploader),
):
    sent = {
        "action": action,
        "id": id,
        "contributor_id": contributor_id,
        "title": title,
        "priority": priority,
        "description": description,
        "percentage_of_project": percentage_of_project,
        "percentage_to_release": percentage_to_release,
        "due_date": due_date,
        "release_date": release_date,
    }
    item = {name: value for name, value in sent.items() if value is not None}

    try:
        task_service.require_milestone(db, project_id, milestone_id)
        item["gallery_items"] = prepare_item_uploads(
            item,
            TASKS,
            uploader,
            project_id=project_id,
            user_id=current_user.id,
            images=image,
            files=file,
        )
        managed = task_service.manage_milestone_tasks(
            db,
            project_id=project_id,
            milestone_id=milestone_id,
            user_id=current_user.id,
            items=[item],
        )
    except ServiceError as exc:
        raise to_http_exception(exc)

    if managed.action == "delete":
        return Response(status_code=204)
    if managed.action == "create":
        response.status_code = 201
    return managed.task


@router.delete(
    "/projects/{project_id}/milestones/{milestone_id}/tasks/{task_id}",
    response_model=TaskDeletedResponse,
)
def delete_task(
    project_id: str,
    milestone_id: str,
    task_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        task_service.delete_milestone_task(
            db,
            project_id=project_id,
            milestone_id=milestone_id,
            task_id=task_id,
            user_id=current_user.id,
        )
    except ServiceError as exc:
        raise to_http_exception(exc)
    return {"message": "Task deleted successfully", "task_id": task_id}

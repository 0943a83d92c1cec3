# selfanypay/task/task_service.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from selfanypay.errors import NotFoundError, ServiceError, UnknownError, ValidationError
from selfanypay.escrow.mutation import TASKS, process_items
from selfanypay.escrow.nested_write import apply_nested_write
from selfanypay.models.contributor import Contributor
from selfanypay.models.milestone import Milestone
from selfanypay.models.task import Task

logger = logging.getLogger("selfanypay.task")


@dataclass
class ManagedMilestone:
    milestone: Milestone
    task_id: Optional[str]
    action: Optional[str]

    @property
    def task(self) -> Optional[Task]:
        for task in self.milestone.tasks:
            if task.id == self.task_id:
                return task
        return None


def _load_milestone_with_tasks(db: Session, milestone_id: str) -> Optional[Milestone]:
    return (
        db.query(Milestone)
        .options(
            selectinload(Milestone.tasks).selectinload(Task.gallery_items),
            selectinload(Milestone.tasks)
            .selectinload(Task.contributor)
            .selectinload(Contributor.user),
        )
        .filter(Milestone.id == milestone_id)
        .populate_existing()
        .first()
    )


def require_milestone(db: Session, project_id: str, milestone_id: str) -> Milestone:
    milestone = db.query(Milestone).filter(Milestone.id == milestone_id).first()
    if not milestone or milestone.project_id != project_id:
        raise NotFoundError("Milestone not found or does not belong to the project")
    return milestone


def manage_milestone_tasks(
    db: Session,
    *,
    project_id: str,
    milestone_id: str,
    user_id: str,
    items: Sequence[Mapping[str, Any]],
) -> ManagedMilestone:
    """Create, update or delete one task of a milestone in one transaction."""
    write = process_items(items, TASKS, project_id=project_id, uploaded_by=user_id)
    if write.is_empty():
        raise ValidationError("no fields provided")

    milestone = require_milestone(db, project_id, milestone_id)

    try:
        result = apply_nested_write(db, milestone, TASKS, write)
        db.commit()
    except ServiceError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception(
            "task_write_failed",
            extra={"project_id": project_id, "milestone_id": milestone_id},
        )
        raise UnknownError("Failed to manage milestone tasks", detail=str(exc)) from exc

    logger.info(
        "task_managed",
        extra={"milestone_id": milestone_id, "action": write.action, "task_id": result.touched_id},
    )

    return ManagedMilestone(
        milestone=_load_milestone_with_tasks(db, milestone_id),
        task_id=result.touched_id,
        action=write.action,
    )


def delete_milestone_task(
    db: Session,
    *,
    project_id: str,
    milestone_id: str,
    task_id: str,
    user_id: str,
) -> ManagedMilestone:
    return manage_milestone_tasks(
        db,
        project_id=project_id,
        milestone_id=milestone_id,
        user_id=user_id,
        items=[{"action": "delete", "id": task_id}],
    )


def fetch_milestone_tasks(db: Session, *, milestone_id: str) -> Milestone:
    milestone = _load_milestone_with_tasks(db, milestone_id)
    if not milestone:
        raise NotFoundError("Milestone not found")
    return milestone

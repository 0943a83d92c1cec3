# selfanypay/milestone/milestone_service.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from selfanypay.errors import ServiceError, UnknownError, ValidationError, NotFoundError
from selfanypay.escrow.mutation import MILESTONES, process_items
from selfanypay.escrow.nested_write import apply_nested_write
from selfanypay.models.milestone import Milestone
from selfanypay.models.project import Project

logger = logging.getLogger("selfanypay.milestone")


@dataclass
class ManagedProject:
    project: Project
    milestone_id: Optional[str]
    action: Optional[str]

    @property
    def milestone(self) -> Optional[Milestone]:
        for milestone in self.project.milestones:
            if milestone.id == self.milestone_id:
                return milestone
        return None


def _load_project_with_milestones(db: Session, project_id: str) -> Optional[Project]:
    return (
        db.query(Project)
        .options(selectinload(Project.milestones).selectinload(Milestone.gallery_items))
        .filter(Project.id == project_id)
        .populate_existing()
        .first()
    )


def require_project(db: Session, project_id: str) -> Project:
    project = db.query(Project).filter(Project.id == project_id).first()
    if not project:
        raise NotFoundError("Project not found")
    return project


def manage_project_milestones(
    db: Session,
    *,
    project_id: str,
    user_id: str,
    items: Sequence[Mapping[str, Any]],
) -> ManagedProject:
    """Create, update or delete one milestone of a project in one transaction."""
    write = process_items(items, MILESTONES, project_id=project_id, uploaded_by=user_id)
    if write.is_empty():
        raise ValidationError("no fields provided")

    project = require_project(db, project_id)

    try:
        result = apply_nested_write(db, project, MILESTONES, write)
        db.commit()
    except ServiceError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("milestone_write_failed", extra={"project_id": project_id})
        raise UnknownError("Failed to manage project milestones", detail=str(exc)) from exc

    logger.info(
        "milestone_managed",
        extra={"project_id": project_id, "action": write.action, "milestone_id": result.touched_id},
    )

    return ManagedProject(
        project=_load_project_with_milestones(db, project_id),
        milestone_id=result.touched_id,
        action=write.action,
    )


def fetch_project_milestones(db: Session, *, project_id: str) -> Project:
    project = _load_project_with_milestones(db, project_id)
    if not project:
        raise NotFoundError("Project not found")
    return project

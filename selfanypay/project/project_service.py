# selfanypay/project/project_service.py
from __future__ import annotations

import logging
from typing import List, Tuple

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from selfanypay.database import utcnow
from selfanypay.errors import NotFoundError, ServiceError, UnknownError, ValidationError
from selfanypay.escrow.mutation import CONTRIBUTORS, process_items
from selfanypay.escrow.nested_write import apply_nested_write
from selfanypay.models.contributor import Contributor
from selfanypay.models.project import Project, ProjectStatus
from selfanypay.models.user import User
from selfanypay.schemas.project_schema import ManageProjectRequest, ProjectCreate

logger = logging.getLogger("selfanypay.project")


# ==========================
#  CREATE PROJECT
# ==========================
def create_project(db: Session, *, owner_id: str, data: ProjectCreate) -> Project:
    project = Project(
        owner_id=owner_id,
        title=data.title,
        description=data.description,
        is_public=data.is_public,
        total_budget=data.total_budget,
        start_date=data.start_date,
        delivery_date=data.delivery_date,
        contract_clauses=data.contract_clauses,
        funds_rule=data.funds_rule,
        project_image_url=data.project_image_url,
        status=ProjectStatus.PENDING,
    )

    # the owner is never their own contributor; duplicates collapse
    for user_id in dict.fromkeys(data.contributor_ids):
        if user_id != owner_id:
            project.contributors.append(Contributor(user_id=user_id, budget_percentage=0.0))

    db.add(project)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ValidationError("Invalid data provided (e.g., non-existent user ID)") from exc

    db.refresh(project)
    logger.info("project_created", extra={"project_id": project.id, "owner_id": owner_id})
    return project


# ==========================
#  ESCROW
# ==========================
def make_project_escrow(db: Session, *, project_id: str) -> Project:
    """Flip ``is_escrowed`` from false to true exactly once.

    A single conditional UPDATE decides the winner, so concurrent activations
    cannot both succeed.
    """
    result = db.execute(
        update(Project)
        .where(
            Project.id == project_id,
            Project.is_deleted == False,  # noqa: E712
            Project.is_escrowed == False,  # noqa: E712
        )
        .values(is_escrowed=True, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )

    if result.rowcount == 0:
        db.rollback()
        exists = (
            db.query(Project.id)
            .filter(Project.id == project_id, Project.is_deleted == False)  # noqa: E712
            .first()
        )
        if not exists:
            raise NotFoundError("Project not found")
        raise ValidationError("Project is already marked as escrowed and cannot be updated again")

    db.commit()
    logger.info("escrow_activated", extra={"project_id": project_id})

    project = db.query(Project).filter(Project.id == project_id).populate_existing().first()
    return project


def manage_escrow_project(
    db: Session,
    *,
    project_id: str,
    user_id: str,
    changes: ManageProjectRequest,
) -> Project:
    """Apply project field changes and at most one contributor item atomically."""
    fields = changes.model_dump(exclude_unset=True, exclude_none=True, exclude={"contributors"})

    write = None
    if changes.contributors is not None:
        write = process_items(
            changes.contributors, CONTRIBUTORS, project_id=project_id, uploaded_by=user_id
        )

    if not fields and (write is None or write.is_empty()):
        raise ValidationError("no fields provided")

    project = db.query(Project).filter(Project.id == project_id).first()
    if not project:
        raise NotFoundError("Project not found")

    try:
        for name, value in fields.items():
            setattr(project, name, value)
        if write is not None:
            apply_nested_write(db, project, CONTRIBUTORS, write)
        db.commit()
    except ServiceError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("project_update_failed", extra={"project_id": project_id})
        raise UnknownError("Failed to update project", detail=str(exc)) from exc

    logger.info(
        "project_managed",
        extra={
            "project_id": project_id,
            "fields": sorted(fields),
            "contributor_action": write.action if write else None,
        },
    )

    return (
        db.query(Project)
        .options(selectinload(Project.contributors))
        .filter(Project.id == project_id)
        .populate_existing()
        .first()
    )


# ==========================
#  READS
# ==========================
def get_project_details(db: Session, *, project_id: str) -> Project:
    project = (
        db.query(Project)
        .options(
            selectinload(Project.owner),
            selectinload(Project.contributors).selectinload(Contributor.user),
        )
        .filter(Project.id == project_id)
        .first()
    )
    if not project:
        raise NotFoundError("Project not found")
    return project


def fetch_all_contributors(db: Session, *, project_id: str) -> List[Contributor]:
    return (
        db.query(Contributor)
        .options(selectinload(Contributor.user))
        .filter(Contributor.project_id == project_id)
        .order_by(Contributor.created_at.asc())
        .all()
    )


def fetch_recently_added_contributors(
    db: Session, *, project_id: str, limit: int = 5
) -> List[Contributor]:
    return (
        db.query(Contributor)
        .options(selectinload(Contributor.user))
        .filter(Contributor.project_id == project_id)
        .order_by(Contributor.created_at.desc())
        .limit(limit)
        .all()
    )


def fetch_user_owned_projects(db: Session, *, user_id: str) -> List[Tuple[Project, int]]:
    rows = (
        db.query(Project, func.count(Contributor.id))
        .outerjoin(Contributor, Contributor.project_id == Project.id)
        .filter(Project.owner_id == user_id, Project.is_deleted == False)  # noqa: E712
        .group_by(Project.id)
        .order_by(Project.created_at.desc())
        .all()
    )
    return [(project, int(count or 0)) for project, count in rows]


def _general_contributors_query(db: Session, owner_id: str):
    return (
        db.query(Contributor)
        .join(Project, Contributor.project_id == Project.id)
        .options(
            selectinload(Contributor.user).selectinload(User.biodata),
            selectinload(Contributor.project),
        )
        .filter(Project.owner_id == owner_id, Project.is_deleted == False)  # noqa: E712
    )


def fetch_general_contributors(db: Session, *, owner_id: str) -> List[Contributor]:
    return _general_contributors_query(db, owner_id).order_by(Contributor.created_at.asc()).all()


def fetch_recent_general_contributors(
    db: Session, *, owner_id: str, limit: int = 5
) -> List[Contributor]:
    return (
        _general_contributors_query(db, owner_id)
        .order_by(Contributor.created_at.desc())
        .limit(limit)
        .all()
    )


def fetch_user_contributor_projects(db: Session, *, user_id: str) -> List[Project]:
    return (
        db.query(Project)
        .join(Contributor, Contributor.project_id == Project.id)
        .options(selectinload(Project.owner))
        .filter(Contributor.user_id == user_id, Project.is_deleted == False)  # noqa: E712
        .distinct()
        .order_by(Project.created_at.desc())
        .all()
    )

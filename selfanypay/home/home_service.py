# selfanypay/home/home_service.py
from __future__ import annotations

from typing import List

from sqlalchemy.orm import Session, selectinload

from selfanypay.errors import ValidationError
from selfanypay.models.project import Project, ProjectStatus

DEFAULT_LIMIT = 10


def fetch_public_projects(db: Session, *, limit: int = DEFAULT_LIMIT, skip: int = 0) -> List[Project]:
    """Public, live projects newest first."""
    if limit <= 0:
        raise ValidationError("Limit must be a positive integer.", fields=["limit"])
    if skip < 0:
        raise ValidationError("Skip must be a non-negative integer.", fields=["skip"])

    return (
        db.query(Project)
        .options(selectinload(Project.owner))
        .filter(
            Project.is_public == True,  # noqa: E712
            Project.is_deleted == False,  # noqa: E712
            Project.status != ProjectStatus.INACTIVE,
        )
        .order_by(Project.created_at.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )

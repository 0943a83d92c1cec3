# selfanypay/escrow/nested_write.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from selfanypay.errors import ConcurrencyError
from selfanypay.escrow.mutation import GalleryAttachment, NestedWrite, Relation
from selfanypay.models.contributor import Contributor
from selfanypay.models.gallery import GalleryItem
from selfanypay.models.milestone import Milestone
from selfanypay.models.task import Task

logger = logging.getLogger("selfanypay.escrow")

RELATED_RECORD_MISSING = "related record not found or concurrent modification"


@dataclass(frozen=True)
class ChildTable:
    model: type
    parent_key: str


CHILD_TABLES = {
    "milestone": ChildTable(Milestone, "project_id"),
    "task": ChildTable(Task, "milestone_id"),
    "contributor": ChildTable(Contributor, "project_id"),
}


@dataclass
class NestedWriteResult:
    created_ids: List[str] = field(default_factory=list)
    updated_ids: List[str] = field(default_factory=list)
    deleted_ids: List[str] = field(default_factory=list)

    @property
    def touched_id(self) -> Optional[str]:
        for ids in (self.created_ids, self.updated_ids, self.deleted_ids):
            if ids:
                return ids[0]
        return None


def apply_nested_write(
    db: Session,
    parent,
    relation: Relation,
    write: NestedWrite,
) -> NestedWriteResult:
    """Stage ``write`` against ``parent``'s children in the open transaction.

    Nothing is committed here; the caller commits or rolls back the whole set.
    """
    table = CHILD_TABLES[relation.label]
    result = NestedWriteResult()
    # a failed flush leaves the session unusable, so the key is read up front
    parent_id = parent.id

    try:
        for instruction in write.create:
            child = table.model(**instruction.fields)
            setattr(child, table.parent_key, parent_id)
            _attach_gallery(child, instruction.gallery)
            db.add(child)
            db.flush()
            result.created_ids.append(child.id)

        for instruction in write.update:
            child = _load_child(db, table, parent_id, instruction.id)
            for name, value in instruction.fields.items():
                setattr(child, name, value)
            _attach_gallery(child, instruction.gallery)
            result.updated_ids.append(child.id)

        for instruction in write.delete:
            child = _load_child(db, table, parent_id, instruction.id)
            db.delete(child)
            result.deleted_ids.append(instruction.id)

        db.flush()
    except (StaleDataError, IntegrityError) as exc:
        logger.warning(
            "nested_write_conflict",
            extra={"relation": relation.label, "parent_id": parent_id, "error_type": type(exc).__name__},
        )
        raise ConcurrencyError(RELATED_RECORD_MISSING) from exc

    return result


def _load_child(db: Session, table: ChildTable, parent_id: str, child_id: str):
    child = (
        db.query(table.model)
        .filter(table.model.id == child_id, getattr(table.model, table.parent_key) == parent_id)
        .first()
    )
    if child is None:
        raise ConcurrencyError(RELATED_RECORD_MISSING)
    return child


def _attach_gallery(child, attachments: List[GalleryAttachment]) -> None:
    for attachment in attachments:
        child.gallery_items.append(
            GalleryItem(
                url=attachment.url,
                file_type=attachment.file_type,
                project_id=attachment.project_id,
                uploaded_by_user_id=attachment.uploaded_by_user_id,
            )
        )

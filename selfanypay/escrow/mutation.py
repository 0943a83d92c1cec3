# selfanypay/escrow/mutation.py
"""Turns one create/update/delete item into a nested-write instruction set.

The processor is pure: it validates the item for the target relation and
describes the write. ``nested_write.apply_nested_write`` performs it.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Type, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from selfanypay.errors import ValidationError
from selfanypay.schemas.milestone_schema import MilestoneItem
from selfanypay.schemas.project_schema import ContributorItem
from selfanypay.schemas.task_schema import TaskItem

ACTIONS = ("create", "update", "delete")

# keys that steer the processor and never land on the child row
CONTROL_KEYS = {"action", "id", "gallery_items"}


@dataclass(frozen=True)
class Relation:
    label: str
    item_model: Type[BaseModel]
    required_on_create: Tuple[str, ...]
    create_defaults: Mapping[str, Any] = field(default_factory=dict)
    accepts_gallery: bool = True
    # set once on create; an update may not carry them
    create_only: Tuple[str, ...] = ()

    @property
    def not_null(self) -> Tuple[str, ...]:
        return tuple(self.required_on_create) + tuple(self.create_defaults)


MILESTONES = Relation(
    label="milestone",
    item_model=MilestoneItem,
    required_on_create=("title", "release_percentage", "due_date"),
)

TASKS = Relation(
    label="task",
    item_model=TaskItem,
    required_on_create=(
        "contributor_id",
        "title",
        "percentage_of_project",
        "percentage_to_release",
        "due_date",
    ),
)

CONTRIBUTORS = Relation(
    label="contributor",
    item_model=ContributorItem,
    required_on_create=("user_id",),
    create_defaults={"budget_percentage": 0.0},
    accepts_gallery=False,
    create_only=("user_id",),
)


# ==========================
#  Instructions
# ==========================
@dataclass(frozen=True)
class GalleryAttachment:
    url: str
    file_type: str
    project_id: str
    uploaded_by_user_id: str


@dataclass
class CreateInstruction:
    fields: Dict[str, Any]
    gallery: List[GalleryAttachment] = field(default_factory=list)


@dataclass
class UpdateInstruction:
    id: str
    fields: Dict[str, Any]
    gallery: List[GalleryAttachment] = field(default_factory=list)


@dataclass
class DeleteInstruction:
    id: str


@dataclass
class NestedWrite:
    create: List[CreateInstruction] = field(default_factory=list)
    update: List[UpdateInstruction] = field(default_factory=list)
    delete: List[DeleteInstruction] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.create or self.update or self.delete)

    @property
    def action(self) -> Optional[str]:
        if self.create:
            return "create"
        if self.update:
            return "update"
        if self.delete:
            return "delete"
        return None


# ==========================
#  Processing
# ==========================
def process_items(
    items: Sequence[Union[Mapping[str, Any], BaseModel]],
    relation: Relation,
    *,
    project_id: str,
    uploaded_by: str,
) -> NestedWrite:
    if len(items) != 1:
        raise ValidationError(
            f"exactly one item required: this service processes a single {relation.label} per call"
        )

    item = _parse_item(items[0], relation)
    action = item.action
    write = NestedWrite()

    if action == "create":
        missing = [name for name in relation.required_on_create if _is_missing(getattr(item, name))]
        if missing:
            raise ValidationError(
                f"create action requires {', '.join(missing)}",
                fields=missing,
            )

        fields = dict(relation.create_defaults)
        fields.update(
            {k: v for k, v in item.model_dump(exclude=CONTROL_KEYS).items() if v is not None}
        )
        write.create.append(
            CreateInstruction(
                fields=fields,
                gallery=_gallery(item, relation, project_id, uploaded_by),
            )
        )

    elif action == "update":
        if _is_missing(item.id):
            raise ValidationError(f"update action requires {relation.label} id", fields=["id"])

        # only what the caller actually sent; everything else stays untouched
        fields = item.model_dump(exclude_unset=True, exclude=CONTROL_KEYS)

        frozen = [name for name in relation.create_only if name in fields]
        if frozen:
            raise ValidationError(
                f"update action cannot change {', '.join(frozen)}",
                fields=frozen,
            )

        cleared = [
            name for name in relation.not_null if name in fields and _is_missing(fields[name])
        ]
        if cleared:
            raise ValidationError(
                f"update action cannot clear {', '.join(cleared)}",
                fields=cleared,
            )

        write.update.append(
            UpdateInstruction(
                id=item.id,
                fields=fields,
                gallery=_gallery(item, relation, project_id, uploaded_by),
            )
        )

    elif action == "delete":
        if _is_missing(item.id):
            raise ValidationError(f"delete action requires {relation.label} id", fields=["id"])
        write.delete.append(DeleteInstruction(id=item.id))

    else:
        raise ValidationError(f"invalid action: {action}", fields=["action"])

    return write


def _parse_item(raw, relation: Relation):
    if isinstance(raw, relation.item_model):
        return raw
    if isinstance(raw, BaseModel):
        raw = raw.model_dump(exclude_unset=True)
    if not isinstance(raw, Mapping):
        raise ValidationError(f"{relation.label} item must be an object")

    try:
        return relation.item_model.model_validate(dict(raw))
    except PydanticValidationError as exc:
        invalid = sorted({".".join(str(part) for part in err["loc"]) for err in exc.errors()})
        raise ValidationError(
            f"invalid {relation.label} fields: {', '.join(invalid)}",
            fields=invalid,
        ) from exc


def _gallery(item, relation: Relation, project_id: str, uploaded_by: str) -> List[GalleryAttachment]:
    if not relation.accepts_gallery:
        return []

    attachments = []
    for gi in getattr(item, "gallery_items", None) or []:
        if _is_missing(gi.url) or _is_missing(gi.file_type):
            raise ValidationError(
                "gallery item creation requires url and file_type",
                fields=["gallery_items"],
            )
        attachments.append(
            GalleryAttachment(
                url=gi.url,
                file_type=gi.file_type,
                project_id=project_id,
                uploaded_by_user_id=uploaded_by,
            )
        )
    return attachments


def _is_missing(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False

# selfanypay/escrow/uploads.py
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from fastapi import UploadFile

from selfanypay.errors import ValidationError
from selfanypay.escrow.mutation import Relation, process_items
from selfanypay.utils.uploader import CloudinaryUploader, collect_pending_files, upload_gallery


def prepare_item_uploads(
    item: Mapping[str, Any],
    relation: Relation,
    uploader: CloudinaryUploader,
    *,
    project_id: str,
    user_id: str,
    images: Optional[List[UploadFile]] = None,
    files: Optional[List[UploadFile]] = None,
) -> List[Dict[str, str]]:
    """Validate a multipart item, then upload its files as gallery items.

    Nothing is uploaded unless the item would be accepted by the processor,
    so a rejected request never leaves files on the remote storage.
    """
    if item.get("action") == "delete" and (images or files):
        raise ValidationError(
            f"delete action does not accept files; remove the {relation.label} without attachments",
            fields=["image", "file"],
        )

    pending = collect_pending_files(images, files)
    process_items([item], relation, project_id=project_id, uploaded_by=user_id)
    return upload_gallery(uploader, pending)

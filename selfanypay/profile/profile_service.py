# selfanypay/profile/profile_service.py
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session, selectinload

from selfanypay.errors import NotFoundError, ValidationError
from selfanypay.models.biodata import Biodata
from selfanypay.models.user import User
from selfanypay.schemas.profile_schema import BiodataUpdate
from selfanypay.utils.uploader import CloudinaryUploader, PendingFile

logger = logging.getLogger("selfanypay.profile")


def get_biodata(db: Session, *, user_id: str) -> Biodata:
    biodata = db.query(Biodata).filter(Biodata.user_id == user_id).first()
    if not biodata:
        raise NotFoundError("Biodata not found for this user")
    return biodata


def upsert_biodata(db: Session, *, user_id: str, data: BiodataUpdate) -> Biodata:
    """Create the user's biodata or update it with the supplied fields only."""
    changes = data.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("No biodata fields provided")

    biodata = db.query(Biodata).filter(Biodata.user_id == user_id).first()
    if biodata is None:
        biodata = Biodata(user_id=user_id)
        db.add(biodata)

    for field, value in changes.items():
        setattr(biodata, field, value)

    db.commit()
    db.refresh(biodata)
    logger.info("biodata_saved", extra={"user_id": user_id, "field_names": sorted(changes)})
    return biodata


def update_profile_photo(
    db: Session,
    *,
    user: User,
    photo: PendingFile,
    uploader: CloudinaryUploader,
) -> User:
    if not photo.content_type.startswith("image/"):
        raise ValidationError("Profile photo must be an image", fields=["image"])

    url = uploader.upload(photo, resource_type="image")
    user.profile_photo_url = url
    db.commit()
    db.refresh(user)
    logger.info("profile_photo_updated", extra={"user_id": user.id})
    return user


def remove_profile_photo(db: Session, *, user: User) -> User:
    if not user.profile_photo_url:
        raise NotFoundError("No profile photo to remove")

    user.profile_photo_url = None
    db.commit()
    db.refresh(user)
    return user


def get_public_profile(
    db: Session, *, user_id: Optional[str] = None, username: Optional[str] = None
) -> User:
    """Look a user up by id or username; missing biodata is created empty."""
    q = db.query(User).options(selectinload(User.biodata))
    if user_id is not None:
        user = q.filter(User.id == user_id).first()
    else:
        user = q.filter(User.username == username).first()
    if not user:
        raise NotFoundError("User not found")

    if user.biodata is None:
        user.biodata = Biodata()
        db.commit()
        db.refresh(user)
    return user

# selfanypay/profile/profile_router.py
from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from selfanypay.auth.security import get_current_user
from selfanypay.database import get_db
from selfanypay.errors import ServiceError, to_http_exception
from selfanypay.models.user import User
from selfanypay.profile import profile_service
from selfanypay.schemas.profile_schema import (
    BiodataRead,
    BiodataSaved,
    BiodataUpdate,
    PhotoUpdated,
)
from selfanypay.utils.uploader import CloudinaryUploader, collect_pending_files, get_uploader

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("/", response_model=BiodataRead)
def get_biodata(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        return profile_service.get_biodata(db, user_id=current_user.id)
    except ServiceError as exc:
        raise to_http_exception(exc)


@router.post("/", response_model=BiodataSaved)
def save_biodata(
    data: BiodataUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        biodata = profile_service.upsert_biodata(db, user_id=current_user.id, data=data)
    except ServiceError as exc:
        raise to_http_exception(exc)
    return {"message": "Biodata saved successfully", "biodata": biodata}


@router.patch("/photo", response_model=PhotoUpdated)
def update_photo(
    image: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    uploader: CloudinaryUploader = Depends(get_uploader),
):
    try:
        [photo] = collect_pending_files([image], None)
        user = profile_service.update_profile_photo(
            db, user=current_user, photo=photo, uploader=uploader
        )
    except ServiceError as exc:
        raise to_http_exception(exc)
    return {"message": "Profile photo updated", "profile_photo_url": user.profile_photo_url}


@router.delete("/photo", response_model=PhotoUpdated)
def remove_photo(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        profile_service.remove_profile_photo(db, user=current_user)
    except ServiceError as exc:
        raise to_http_exception(exc)
    return {"message": "Profile photo removed", "profile_photo_url": None}

# selfanypay/profile/user_router.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from selfanypay.auth.security import get_current_user
from selfanypay.database import get_db
from selfanypay.errors import ServiceError, to_http_exception
from selfanypay.profile import profile_service
from selfanypay.schemas.profile_schema import ProfileRead

router = APIRouter(
    prefix="/users",
    tags=["users"],
    dependencies=[Depends(get_current_user)],
)


@router.get("/username/{username}", response_model=ProfileRead)
def get_user_by_username(username: str, db: Session = Depends(get_db)):
    try:
        return profile_service.get_public_profile(db, username=username)
    except ServiceError as exc:
        raise to_http_exception(exc)


@router.get("/{user_id}", response_model=ProfileRead)
def get_user(user_id: str, db: Session = Depends(get_db)):
    try:
        return profile_service.get_public_profile(db, user_id=user_id)
    except ServiceError as exc:
        raise to_http_exception(exc)

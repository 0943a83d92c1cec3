# selfanypay/follows/follows_router.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from selfanypay.auth.security import get_current_user
from selfanypay.database import get_db
from selfanypay.errors import ServiceError, to_http_exception
from selfanypay.follows import follows_service
from selfanypay.models.user import User
from selfanypay.schemas.common_schema import MessageResponse
from selfanypay.schemas.follow_schema import (
    FollowCreated,
    FollowerRead,
    FollowingRead,
    UserSuggestions,
)

router = APIRouter(prefix="/follows", tags=["follows"])


def _pagination(limit: Optional[int] = None, skip: Optional[int] = None):
    if limit is not None and limit <= 0:
        raise HTTPException(status_code=400, detail={"message": "Limit must be a positive integer."})
    if skip is not None and skip < 0:
        raise HTTPException(status_code=400, detail={"message": "Skip must be a non-negative integer."})
    return {"limit": limit, "skip": skip}


@router.get("/find", response_model=UserSuggestions)
def get_users(
    search: Optional[str] = None,
    page: dict = Depends(_pagination),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    users, total = follows_service.get_users_to_follow(
        db, current_user_id=current_user.id, search=search, **page
    )
    return {"users": users, "total": total}


@router.get("/followers", response_model=list[FollowerRead])
def get_followers(
    page: dict = Depends(_pagination),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return follows_service.list_followers(db, user_id=current_user.id, **page)


@router.get("/following", response_model=list[FollowingRead])
def get_following(
    page: dict = Depends(_pagination),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return follows_service.list_following(db, user_id=current_user.id, **page)


@router.post("/{following_id}", status_code=201, response_model=FollowCreated)
def follow(
    following_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        result = follows_service.follow_user(
            db, follower_id=current_user.id, following_id=following_id
        )
    except ServiceError as exc:
        raise to_http_exception(exc)
    return {"message": "User followed successfully.", "follow_id": result.id}


@router.delete("/{following_id}", response_model=MessageResponse)
def unfollow(
    following_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        follows_service.unfollow_user(db, follower_id=current_user.id, following_id=following_id)
    except ServiceError as exc:
        raise to_http_exception(exc)
    return {"message": "User unfollowed successfully."}

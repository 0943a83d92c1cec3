# selfanypay/follows/follows_service.py
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from selfanypay.errors import NotFoundError, ValidationError
from selfanypay.models.follow import Follow
from selfanypay.models.user import User

logger = logging.getLogger("selfanypay.follows")


def follow_user(db: Session, *, follower_id: str, following_id: str) -> Follow:
    """Follow ``following_id``; following twice returns the same row."""
    if follower_id == following_id:
        raise ValidationError("A user cannot follow themselves.")

    if not db.get(User, following_id):
        raise NotFoundError("User not found")

    existing = _find(db, follower_id, following_id)
    if existing:
        return existing

    follow = Follow(follower_id=follower_id, following_id=following_id)
    db.add(follow)
    try:
        db.commit()
    except IntegrityError:
        # a concurrent request created the pair first
        db.rollback()
        existing = _find(db, follower_id, following_id)
        if existing is None:
            raise
        return existing

    db.refresh(follow)
    logger.info("user_followed", extra={"follower_id": follower_id, "following_id": following_id})
    return follow


def unfollow_user(db: Session, *, follower_id: str, following_id: str) -> None:
    follow = _find(db, follower_id, following_id)
    if not follow:
        raise NotFoundError("Follow relationship not found.")

    db.delete(follow)
    db.commit()
    logger.info("user_unfollowed", extra={"follower_id": follower_id, "following_id": following_id})


def list_followers(
    db: Session, *, user_id: str, limit: Optional[int] = None, skip: Optional[int] = None
) -> List[Follow]:
    q = (
        db.query(Follow)
        .options(selectinload(Follow.follower))
        .filter(Follow.following_id == user_id)
        .order_by(Follow.created_at.desc())
    )
    return _paginate(q, limit, skip).all()


def list_following(
    db: Session, *, user_id: str, limit: Optional[int] = None, skip: Optional[int] = None
) -> List[Follow]:
    q = (
        db.query(Follow)
        .options(selectinload(Follow.following))
        .filter(Follow.follower_id == user_id)
        .order_by(Follow.created_at.desc())
    )
    return _paginate(q, limit, skip).all()


def get_users_to_follow(
    db: Session,
    *,
    current_user_id: str,
    search: Optional[str] = None,
    limit: Optional[int] = None,
    skip: Optional[int] = None,
) -> Tuple[List[User], int]:
    already_following = select(Follow.following_id).where(Follow.follower_id == current_user_id)

    q = db.query(User).filter(
        User.id != current_user_id,
        User.is_verified == True,  # noqa: E712
        User.id.notin_(already_following),
    )
    if search:
        pattern = f"%{search.strip()}%"
        q = q.filter(or_(User.username.ilike(pattern), User.full_name.ilike(pattern)))

    total = q.count()
    users = _paginate(q.order_by(User.created_at.desc()), limit, skip).all()
    return users, total


def _find(db: Session, follower_id: str, following_id: str) -> Optional[Follow]:
    return (
        db.query(Follow)
        .filter(Follow.follower_id == follower_id, Follow.following_id == following_id)
        .first()
    )


def _paginate(q, limit: Optional[int], skip: Optional[int]):
    if skip:
        q = q.offset(skip)
    if limit:
        q = q.limit(limit)
    return q

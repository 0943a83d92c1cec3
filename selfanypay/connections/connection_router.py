# selfanypay/connections/connection_router.py
from typing import Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from selfanypay.auth.security import get_current_user
from selfanypay.config import Settings, get_settings
from selfanypay.connections import connection_service
from selfanypay.database import get_db
from selfanypay.errors import ServiceError, to_http_exception
from selfanypay.models.user import User
from selfanypay.schemas.connection_schema import (
    AuthorizeUrl,
    ConnectionRead,
    ConnectionSaved,
)

router = APIRouter(prefix="/connections", tags=["connections"])


@router.get("/github", response_model=AuthorizeUrl)
def github_authorize(
    current_user: User = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
):
    try:
        url = connection_service.github_authorize_url(settings, state=current_user.id)
    except ServiceError as exc:
        raise to_http_exception(exc)
    return {"url": url}


@router.get("/github/callback", response_model=ConnectionSaved)
def github_callback(
    code: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    try:
        connection = connection_service.connect_github(
            db, user_id=current_user.id, code=code or "", settings=settings
        )
    except ServiceError as exc:
        raise to_http_exception(exc)
    return {"message": "GitHub account connected", "connection": connection}


@router.get("/", response_model=list[ConnectionRead])
def get_connections(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return connection_service.list_connections(db, user_id=current_user.id)


@router.delete("/{connection_id}", status_code=204)
def remove_connection(
    connection_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        connection_service.delete_connection(
            db, user_id=current_user.id, connection_id=connection_id
        )
    except ServiceError as exc:
        raise to_http_exception(exc)
    return Response(status_code=204)

# selfanypay/connections/connection_service.py
from __future__ import annotations

import logging
from typing import List
from urllib.parse import urlencode

import requests
from sqlalchemy.orm import Session

from selfanypay.config import Settings
from selfanypay.database import utcnow
from selfanypay.errors import NotFoundError, UnknownError, ValidationError
from selfanypay.models.connection import ServiceConnection

logger = logging.getLogger("selfanypay.connections")

GITHUB_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"
GITHUB_USER_URL = "https://api.github.com/user"
GITHUB_SCOPE = "read:user repo"

PROVIDER_TIMEOUT = 15


class GitHubError(UnknownError):
    """GitHub answered with something we cannot use."""

    def __init__(self, message: str, *, detail=None):
        super().__init__(message, detail=detail, status_code=502)


def _require_github(settings: Settings) -> None:
    if not settings.github_client_id or not settings.github_client_secret:
        raise UnknownError("GitHub integration is not configured")


def github_authorize_url(settings: Settings, *, state: str) -> str:
    _require_github(settings)
    params = {
        "client_id": settings.github_client_id,
        "scope": GITHUB_SCOPE,
        "state": state,
    }
    if settings.github_redirect_uri:
        params["redirect_uri"] = settings.github_redirect_uri
    return f"{GITHUB_AUTHORIZE_URL}?{urlencode(params)}"


def _exchange_code(settings: Settings, code: str) -> dict:
    try:
        response = requests.post(
            GITHUB_TOKEN_URL,
            data={
                "client_id": settings.github_client_id,
                "client_secret": settings.github_client_secret,
                "code": code,
                "redirect_uri": settings.github_redirect_uri,
            },
            headers={"Accept": "application/json"},
            timeout=PROVIDER_TIMEOUT,
        )
        response.raise_for_status()
        payload = response.json()
    except (requests.RequestException, ValueError) as exc:
        raise GitHubError("GitHub token exchange failed", detail=str(exc)) from exc

    if not payload.get("access_token"):
        raise GitHubError(
            "GitHub token exchange failed",
            detail=payload.get("error_description") or payload.get("error"),
        )
    return payload


def _fetch_profile(access_token: str) -> dict:
    try:
        response = requests.get(
            GITHUB_USER_URL,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/vnd.github+json",
            },
            timeout=PROVIDER_TIMEOUT,
        )
        response.raise_for_status()
        return response.json()
    except (requests.RequestException, ValueError) as exc:
        raise GitHubError("Failed to fetch GitHub profile", detail=str(exc)) from exc


def connect_github(db: Session, *, user_id: str, code: str, settings: Settings) -> ServiceConnection:
    """Exchange an OAuth ``code`` and store (or refresh) the GitHub connection."""
    _require_github(settings)
    if not code:
        raise ValidationError("Missing authorization code", fields=["code"])

    token = _exchange_code(settings, code)
    profile = _fetch_profile(token["access_token"])
    account_id = str(profile.get("id", ""))
    if not account_id:
        raise GitHubError("GitHub profile has no id")

    connection = (
        db.query(ServiceConnection)
        .filter(
            ServiceConnection.user_id == user_id,
            ServiceConnection.service_type == "GITHUB",
            ServiceConnection.service_account_id == account_id,
        )
        .first()
    )
    if connection is None:
        connection = ServiceConnection(
            user_id=user_id,
            service_type="GITHUB",
            service_account_id=account_id,
        )
        db.add(connection)

    connection.access_token = token["access_token"]
    connection.refresh_token = token.get("refresh_token")
    connection.connection_status = "ACTIVE"
    connection.connection_metadata = {
        "login": profile.get("login"),
        "name": profile.get("name"),
        "avatar_url": profile.get("avatar_url"),
        "html_url": profile.get("html_url"),
        "scope": token.get("scope"),
    }
    connection.last_sync_at = utcnow()

    db.commit()
    db.refresh(connection)
    logger.info("github_connected", extra={"user_id": user_id, "connection_id": connection.id})
    return connection


def list_connections(db: Session, *, user_id: str) -> List[ServiceConnection]:
    return (
        db.query(ServiceConnection)
        .filter(
            ServiceConnection.user_id == user_id,
            ServiceConnection.connection_status == "ACTIVE",
        )
        .order_by(ServiceConnection.created_at.desc())
        .all()
    )


def delete_connection(db: Session, *, user_id: str, connection_id: str) -> None:
    connection = (
        db.query(ServiceConnection)
        .filter(ServiceConnection.id == connection_id, ServiceConnection.user_id == user_id)
        .first()
    )
    if not connection:
        raise NotFoundError("Connection not found")

    db.delete(connection)
    db.commit()
    logger.info("connection_deleted", extra={"user_id": user_id, "connection_id": connection_id})

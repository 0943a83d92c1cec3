# selfanypay/home/home_router.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from selfanypay.database import get_db
from selfanypay.errors import ServiceError, to_http_exception
from selfanypay.home import home_service
from selfanypay.schemas.home_schema import PublicProjectsResponse

router = APIRouter(prefix="/home", tags=["home"])


@router.get("/projects", response_model=PublicProjectsResponse)
def get_public_projects(
    limit: int = home_service.DEFAULT_LIMIT,
    skip: int = 0,
    db: Session = Depends(get_db),
):
    try:
        projects = home_service.fetch_public_projects(db, limit=limit, skip=skip)
    except ServiceError as exc:
        raise to_http_exception(exc)
    return {"message": "Public projects fetched successfully.", "data": projects}

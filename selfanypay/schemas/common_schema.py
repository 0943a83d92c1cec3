# selfanypay/schemas/common_schema.py
from __future__ import annotations

from datetime import date, datetime, timezone

from pydantic import BaseModel, ConfigDict


def parse_datetime(value):
    """Accept datetimes, dates and ISO-8601 strings (date-only included).

    Aware values are normalised to naive UTC, which is what the columns store.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValueError(f"'{value}' is not a valid date")
    else:
        raise ValueError(f"'{value}' is not a valid date")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


class GalleryItemInput(BaseModel):
    url: str = ""
    file_type: str = ""


class GalleryItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    url: str
    file_type: str
    project_id: str
    uploaded_by_user_id: str
    created_at: datetime


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str | None = None
    full_name: str
    profile_photo_url: str | None = None


class MessageResponse(BaseModel):
    message: str

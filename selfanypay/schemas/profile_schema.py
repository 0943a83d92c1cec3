# selfanypay/schemas/profile_schema.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from selfanypay.schemas.common_schema import parse_datetime

BIODATA_FIELDS = (
    "date_of_birth",
    "age",
    "country",
    "state",
    "city",
    "pronouns",
    "phone",
    "role",
    "industry",
    "tags",
    "headline",
    "languages",
)


class BiodataUpdate(BaseModel):
    date_of_birth: Optional[datetime] = None
    age: Optional[int] = None
    country: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    pronouns: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    industry: Optional[str] = None
    tags: Optional[str] = None
    headline: Optional[str] = None
    languages: Optional[str] = None

    @field_validator("date_of_birth", mode="before")
    def parse_birth_date(cls, v):
        return parse_datetime(v)

    @field_validator("age")
    def age_not_negative(cls, v):
        if v is not None and v < 0:
            raise ValueError("Age cannot be negative")
        return v


class BiodataRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    date_of_birth: Optional[datetime] = None
    age: Optional[int] = None
    country: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    pronouns: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    industry: Optional[str] = None
    tags: Optional[str] = None
    headline: Optional[str] = None
    languages: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class BiodataSaved(BaseModel):
    message: str
    biodata: BiodataRead


class ProfileRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    username: Optional[str] = None
    full_name: str
    profile_photo_url: Optional[str] = None
    last_active: Optional[datetime] = None
    created_at: datetime
    biodata: Optional[BiodataRead] = None


class PhotoUpdated(BaseModel):
    message: str
    profile_photo_url: Optional[str] = None

# selfanypay/schemas/connection_schema.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


class ConnectionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    service_type: str
    service_account_id: str
    connection_status: str
    connection_metadata: Optional[Dict[str, Any]] = None
    last_sync_at: Optional[datetime] = None
    created_at: datetime


class AuthorizeUrl(BaseModel):
    url: str


class ConnectionSaved(BaseModel):
    message: str
    connection: ConnectionRead

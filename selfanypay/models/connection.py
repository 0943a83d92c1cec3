# selfanypay/models/connection.py
from __future__ import annotations

from sqlalchemy import JSON, Column, DateTime, ForeignKey, String

from selfanypay.database import Base, new_id, utcnow

SERVICE_TYPES = ("GITHUB", "JIRA", "GMAIL", "GOOGLE_MEET")


class ServiceConnection(Base):
    __tablename__ = "service_connections"

    id = Column(String(32), primary_key=True, default=new_id)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    service_type = Column(String(20), nullable=False)  # GITHUB | JIRA | GMAIL | GOOGLE_MEET
    service_account_id = Column(String, nullable=False)

    access_token = Column(String, nullable=False)
    refresh_token = Column(String, nullable=True)

    connection_status = Column(String(20), default="ACTIVE", nullable=False)
    connection_metadata = Column(JSON, nullable=True)
    last_sync_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

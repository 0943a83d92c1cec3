# selfanypay/models/user.py
from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.orm import relationship

from selfanypay.database import Base, new_id, utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)

    email = Column(String(255), unique=True, index=True, nullable=False)
    username = Column(String(100), unique=True, index=True, nullable=True)
    full_name = Column(String(255), nullable=False)
    firstname = Column(String(100), nullable=True)
    lastname = Column(String(100), nullable=True)

    password_hash = Column(String(255), nullable=False)
    user_type = Column(String(20), default="user", nullable=False)

    # accounts stay unusable for login until the emailed code is confirmed
    is_verified = Column(Boolean, default=False, nullable=False)
    verification_code = Column(String(6), nullable=True)
    verification_code_expires = Column(DateTime, nullable=True)

    reset_password_code = Column(String(6), nullable=True)
    reset_password_expires = Column(DateTime, nullable=True)

    profile_photo_url = Column(String, nullable=True)
    last_active = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    biodata = relationship(
        "Biodata",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )

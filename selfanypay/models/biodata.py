# selfanypay/models/biodata.py
from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from selfanypay.database import Base, new_id, utcnow


class Biodata(Base):
    __tablename__ = "biodata"

    id = Column(String(32), primary_key=True, default=new_id)
    user_id = Column(
        String(32),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )

    date_of_birth = Column(DateTime, nullable=True)
    age = Column(Integer, nullable=True)
    country = Column(String, nullable=True)
    state = Column(String, nullable=True)
    city = Column(String, nullable=True)
    pronouns = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    role = Column(String, nullable=True)
    industry = Column(String, nullable=True)
    tags = Column(String, nullable=True)
    headline = Column(String, nullable=True)
    languages = Column(String, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="biodata")

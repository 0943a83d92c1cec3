# selfanypay/models/contributor.py
from __future__ import annotations

from sqlalchemy import Column, DateTime, Float, ForeignKey, String
from sqlalchemy.orm import relationship

from selfanypay.database import Base, new_id, utcnow


class Contributor(Base):
    __tablename__ = "contributors"

    id = Column(String(32), primary_key=True, default=new_id)

    project_id = Column(String(32), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)

    role = Column(String, nullable=True)
    budget_percentage = Column(Float, default=0.0, nullable=False)
    release_percentage = Column(Float, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    project = relationship("Project", back_populates="contributors")
    user = relationship("User")

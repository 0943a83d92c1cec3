# selfanypay/models/task.py
from __future__ import annotations

from sqlalchemy import Column, DateTime, Float, ForeignKey, String
from sqlalchemy.orm import relationship

from selfanypay.database import Base, new_id, utcnow


class Task(Base):
    __tablename__ = "tasks"

    id = Column(String(32), primary_key=True, default=new_id)

    milestone_id = Column(String(32), ForeignKey("milestones.id", ondelete="CASCADE"), nullable=False, index=True)
    contributor_id = Column(String(32), ForeignKey("contributors.id"), nullable=False, index=True)

    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    priority = Column(String, default="medium")

    percentage_of_project = Column(Float, nullable=False)
    percentage_to_release = Column(Float, nullable=False)

    due_date = Column(DateTime, nullable=False)
    release_date = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    milestone = relationship("Milestone", back_populates="tasks")
    contributor = relationship("Contributor")
    gallery_items = relationship(
        "GalleryItem",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="GalleryItem.created_at",
    )

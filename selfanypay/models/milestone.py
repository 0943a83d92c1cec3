# selfanypay/models/milestone.py
from __future__ import annotations

from sqlalchemy import Column, DateTime, Float, ForeignKey, String
from sqlalchemy.orm import relationship

from selfanypay.database import Base, new_id, utcnow


class Milestone(Base):
    __tablename__ = "milestones"

    id = Column(String(32), primary_key=True, default=new_id)
    project_id = Column(String(32), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    release_percentage = Column(Float, nullable=False)

    due_date = Column(DateTime, nullable=False)
    release_date = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    project = relationship("Project", back_populates="milestones")
    tasks = relationship(
        "Task",
        back_populates="milestone",
        cascade="all, delete-orphan",
        order_by="Task.due_date",
    )
    gallery_items = relationship(
        "GalleryItem",
        back_populates="milestone",
        cascade="all, delete-orphan",
        order_by="GalleryItem.created_at",
    )

# selfanypay/models/gallery.py
from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from selfanypay.database import Base, new_id, utcnow


class GalleryItem(Base):
    __tablename__ = "gallery_items"

    id = Column(String(32), primary_key=True, default=new_id)

    url = Column(String, nullable=False)
    file_type = Column(String, nullable=False)

    project_id = Column(String(32), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    uploaded_by_user_id = Column(String(32), ForeignKey("users.id"), nullable=False)

    # owned by exactly one of these
    milestone_id = Column(String(32), ForeignKey("milestones.id", ondelete="CASCADE"), nullable=True, index=True)
    task_id = Column(String(32), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=True, index=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    milestone = relationship("Milestone", back_populates="gallery_items")
    task = relationship("Task", back_populates="gallery_items")

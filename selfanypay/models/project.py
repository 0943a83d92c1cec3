# selfanypay/models/project.py
from __future__ import annotations

import enum

from sqlalchemy import Boolean, Column, DateTime, Enum, Float, ForeignKey, String
from sqlalchemy.orm import relationship

from selfanypay.database import Base, new_id, utcnow


class ProjectStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    COMPLETED = "COMPLETED"


class Project(Base):
    __tablename__ = "projects"

    id = Column(String(32), primary_key=True, default=new_id)
    owner_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    project_image_url = Column(String, nullable=True)

    is_public = Column(Boolean, default=False, nullable=False)
    status = Column(Enum(ProjectStatus), default=ProjectStatus.PENDING, nullable=False)

    # escrow / budget
    is_escrowed = Column(Boolean, default=False, nullable=False)
    total_budget = Column(Float, default=0.0, nullable=False)
    amount_released = Column(Float, default=0.0, nullable=False)
    amount_pending = Column(Float, default=0.0, nullable=False)
    completion_percentage = Column(Float, default=0.0, nullable=False)
    funds_rule = Column(Boolean, default=False, nullable=False)
    contract_clauses = Column(String, nullable=True)

    start_date = Column(DateTime, nullable=True)
    delivery_date = Column(DateTime, nullable=True)
    receive_email_notifications = Column(Boolean, default=True, nullable=False)

    # soft delete
    is_deleted = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    owner = relationship("User")
    contributors = relationship(
        "Contributor",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="Contributor.created_at",
    )
    milestones = relationship(
        "Milestone",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="Milestone.due_date",
    )

"""
Shared Infrastructure Models
=============================

SQLAlchemy ORM models for records owned by the surrounding system.

Projects and artifacts are created and updated elsewhere; the risk and
SLA contexts only read them.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from sqlalchemy import String, DateTime, Integer, Float, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from review_gate.infrastructure.database import Base
from review_gate.config import ArtifactState


def _new_id() -> str:
    return str(uuid4())


class ProjectModel(Base):
    """
    Database model for a project.

    Maps to the 'projects' table.
    """
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    artifacts: Mapped[list["ArtifactModel"]] = relationship(back_populates="project")


class ArtifactModel(Base):
    """
    Database model for an AI-generated artifact.

    Maps to the 'artifacts' table.
    """
    __tablename__ = "artifacts"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    project_id: Mapped[str] = mapped_column(ForeignKey("projects.id"), nullable=False, index=True)

    # Scoring inputs
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    source_agent: Mapped[str] = mapped_column(String(100), nullable=False)
    ai_confidence_score: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    files_affected: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Review lifecycle
    state: Mapped[str] = mapped_column(String(50), nullable=False, default=ArtifactState.DRAFT)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    submitted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    rejected_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    project: Mapped[ProjectModel] = relationship(back_populates="artifacts")

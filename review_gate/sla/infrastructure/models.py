"""
SLA Infrastructure Models
==========================

SQLAlchemy ORM models for SLA module.

These are the database representations of our domain entities.
They belong in the infrastructure layer, not the domain layer.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from sqlalchemy import String, DateTime, Float, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from review_gate.infrastructure.database import Base
from review_gate.config import SLAStatus


class SLATrackingModel(Base):
    """
    Database model for SLATracking entity.

    Maps to the 'sla_tracking' table. One row per artifact.
    """
    __tablename__ = "sla_tracking"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: str(uuid4()))
    artifact_id: Mapped[str] = mapped_column(ForeignKey("artifacts.id"), unique=True, index=True, nullable=False)

    # SLA window
    risk_level: Mapped[str] = mapped_column(String(50), nullable=False)
    deadline_hours: Mapped[float] = mapped_column(Float, nullable=False)
    deadline: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default=SLAStatus.WITHIN_SLA, index=True)
    warning_threshold: Mapped[float] = mapped_column(Float, nullable=False, default=75)
    warning_sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Escalation
    escalated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    escalated_to_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    escalation_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

"""
Risk Infrastructure Models
==========================

SQLAlchemy ORM models for the risk module.

These are the database representations of our domain value objects.
They belong in the infrastructure layer, not the domain layer.
"""

from datetime import datetime, timezone
from typing import List
from uuid import uuid4

from sqlalchemy import String, DateTime, Boolean, Integer, Float, JSON, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from review_gate.infrastructure.database import Base
from review_gate.config import RiskLevel


class ApprovalSettingsModel(Base):
    """
    Database model for per-project approval settings.

    Maps to the 'approval_settings' table. One row per project.
    """
    __tablename__ = "approval_settings"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: str(uuid4()))
    project_id: Mapped[str] = mapped_column(ForeignKey("projects.id"), unique=True, index=True, nullable=False)

    # Risk thresholds
    low_risk_threshold: Mapped[int] = mapped_column(Integer, nullable=False, default=25)
    medium_risk_threshold: Mapped[int] = mapped_column(Integer, nullable=False, default=50)
    high_risk_threshold: Mapped[int] = mapped_column(Integer, nullable=False, default=75)

    # SLA windows (hours)
    low_risk_sla_hours: Mapped[float] = mapped_column(Float, nullable=False, default=1)
    medium_risk_sla_hours: Mapped[float] = mapped_column(Float, nullable=False, default=4)
    high_risk_sla_hours: Mapped[float] = mapped_column(Float, nullable=False, default=24)
    critical_risk_sla_hours: Mapped[float] = mapped_column(Float, nullable=False, default=48)

    # Auto-approval
    auto_approve_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    auto_approve_max_risk: Mapped[str] = mapped_column(String(50), nullable=False, default=RiskLevel.LOW)
    auto_approve_min_confidence: Mapped[float] = mapped_column(Float, nullable=False, default=90)

    # Notifications
    notify_on_submission: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    notify_on_approval: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    notify_on_rejection: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    notify_on_sla_warning: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Escalation
    escalation_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    escalation_chain: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

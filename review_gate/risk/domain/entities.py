"""
Risk Domain Entities
====================

Pure Python domain entities for risk assessment.

Following Domain-Driven Design principles, these entities contain
business logic and are free of infrastructure concerns.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from review_gate.core.exceptions import DomainException
from review_gate.risk.domain.value_objects import (
    ApprovalRequirements,
    RiskFactors,
    ThresholdConfig,
)


@dataclass
class Artifact:
    """
    AI-generated artifact awaiting (or past) review.

    Owned by the surrounding system; this core only reads it.
    """

    id: str
    project_id: str
    type: str
    source_agent: str
    state: str
    created_at: datetime

    ai_confidence_score: Optional[float] = None
    files_affected: Optional[int] = None

    submitted_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None

    # Populated when loaded together with its project's approval settings
    project_settings: Optional[ThresholdConfig] = None

    def __post_init__(self):
        """Validate artifact on initialization."""
        if self.approved_at and self.rejected_at:
            raise DomainException(
                "artifact cannot be both approved and rejected",
                details={"artifact_id": self.id}
            )

    @property
    def is_resolved(self) -> bool:
        """Check if a review decision has been made."""
        return self.approved_at is not None or self.rejected_at is not None

    @property
    def resolved_at(self) -> Optional[datetime]:
        return self.approved_at or self.rejected_at


@dataclass
class RiskAssessment:
    """Result of scoring an artifact."""

    risk_score: int
    risk_level: str
    risk_factors: RiskFactors
    approval_requirements: ApprovalRequirements

    def to_dict(self) -> dict:
        return {
            "risk_score": self.risk_score,
            "risk_level": self.risk_level,
            "risk_factors": self.risk_factors.to_dict(),
            "approval_requirements": self.approval_requirements.to_dict(),
        }

"""
Risk Application DTOs
=====================

Data Transfer Objects for the risk assessment API layer.

These Pydantic models handle serialization/deserialization and validation
for requests and responses.
"""

from typing import List, Optional, Any, Dict

from pydantic import BaseModel, ConfigDict, Field

from review_gate.risk.domain import RiskAssessment, ThresholdConfig
from review_gate.risk.domain.value_objects import RiskLevelStr


# ========== Request DTOs ==========

class AssessRiskInput(BaseModel):
    """Input for scoring a single artifact."""
    project_id: str = Field(..., min_length=1, description="Owning project")
    artifact_type: str = Field(..., min_length=1, description="Artifact type (script, test_case, ...)")
    ai_confidence_score: Optional[float] = Field(None, ge=0, le=100, description="Agent-reported confidence")
    files_affected: Optional[int] = Field(1, ge=0, description="Number of files the artifact touches")
    source_agent: str = Field(..., min_length=1, description="Agent that produced the artifact")


class ApprovalSettingsUpdate(BaseModel):
    """
    Partial update of a project's approval settings.

    Only fields that are set are merged; range and ordering checks happen
    on the merged result.
    """
    model_config = ConfigDict(extra="forbid")

    low_risk_threshold: Optional[int] = None
    medium_risk_threshold: Optional[int] = None
    high_risk_threshold: Optional[int] = None
    low_risk_sla_hours: Optional[float] = None
    medium_risk_sla_hours: Optional[float] = None
    high_risk_sla_hours: Optional[float] = None
    critical_risk_sla_hours: Optional[float] = None
    auto_approve_enabled: Optional[bool] = None
    auto_approve_max_risk: Optional[RiskLevelStr] = None
    auto_approve_min_confidence: Optional[float] = None
    notify_on_submission: Optional[bool] = None
    notify_on_approval: Optional[bool] = None
    notify_on_rejection: Optional[bool] = None
    notify_on_sla_warning: Optional[bool] = None
    escalation_enabled: Optional[bool] = None
    escalation_chain: Optional[List[str]] = None


# ========== Response DTOs ==========

class RiskFactorsResponse(BaseModel):
    artifact_type_score: float
    scope_score: float
    confidence_score: float
    historical_rejection_score: float
    details: Dict[str, Any] = Field(default_factory=dict)


class ApprovalRequirementsResponse(BaseModel):
    required_approvals: int
    requires_admin: bool
    requires_lead: bool
    can_auto_approve: bool
    auto_approve_reason: Optional[str] = None


class RiskAssessmentResponse(BaseModel):
    """Response model for a risk assessment."""
    risk_score: int = Field(..., ge=0, le=100)
    risk_level: RiskLevelStr
    risk_factors: RiskFactorsResponse
    approval_requirements: ApprovalRequirementsResponse

    @classmethod
    def from_domain(cls, assessment: RiskAssessment) -> "RiskAssessmentResponse":
        return cls(**assessment.to_dict())


class ApprovalSettingsResponse(BaseModel):
    """Response model for a project's effective approval settings."""
    project_id: str
    settings: ThresholdConfig

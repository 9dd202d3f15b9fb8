"""
SLA Application DTOs
=====================

Data Transfer Objects for SLA API layer.

These Pydantic models handle serialization/deserialization and validation
for API requests and responses.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Literal
from datetime import datetime

from review_gate.sla.domain import (
    SLAMetrics,
    SLAPage,
    SLAStatusResult,
    SLATracking,
    SLATransition,
)


# ========== Type Aliases for Literals ==========
RiskLevelStr = Literal["low", "medium", "high", "critical"]
SLAStatusStr = Literal["within_sla", "approaching_sla", "breached", "escalated"]


# ========== Request DTOs ==========

class EscalateInput(BaseModel):
    """Escalation of one artifact's SLA to a reviewer."""
    artifact_id: str = Field(..., min_length=1)
    escalated_to_id: str = Field(..., min_length=1, description="Reviewer receiving the escalation")
    reason: str = Field(..., min_length=1, description="Why the artifact is escalated")


class EscalateRequest(BaseModel):
    """Request body for the escalate endpoint (artifact id comes from the path)."""
    escalated_to_id: str = Field(..., min_length=1)
    reason: str = Field(..., min_length=1)


class CreateSLATrackingRequest(BaseModel):
    """Request body for starting SLA tracking."""
    risk_level: RiskLevelStr = Field(..., description="Risk level the artifact was assessed at")


# ========== Response DTOs ==========

class SLATrackingResponse(BaseModel):
    """Response model for a tracking row."""
    artifact_id: str
    project_id: Optional[str] = None
    risk_level: RiskLevelStr
    deadline_hours: float
    deadline: datetime
    status: SLAStatusStr
    warning_threshold: float
    warning_sent_at: Optional[datetime] = None
    escalated_at: Optional[datetime] = None
    escalated_to_id: Optional[str] = None
    escalation_reason: Optional[str] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, tracking: SLATracking) -> "SLATrackingResponse":
        return cls(
            artifact_id=tracking.artifact_id,
            project_id=tracking.project_id,
            risk_level=tracking.risk_level,
            deadline_hours=tracking.deadline_hours,
            deadline=tracking.deadline,
            status=tracking.status,
            warning_threshold=tracking.warning_threshold,
            warning_sent_at=tracking.warning_sent_at,
            escalated_at=tracking.escalated_at,
            escalated_to_id=tracking.escalated_to_id,
            escalation_reason=tracking.escalation_reason,
            completed_at=tracking.completed_at,
            created_at=tracking.created_at,
            updated_at=tracking.updated_at
        )


class SLAStatusResponse(BaseModel):
    """Response model for live SLA status."""
    artifact_id: str
    status: SLAStatusStr
    deadline: datetime
    deadline_hours: float
    percentage_elapsed: float = Field(..., ge=0, le=100)
    time_remaining_seconds: float = Field(..., ge=0, description="0 once overdue")
    is_overdue: bool
    is_approaching: bool

    @classmethod
    def from_domain(cls, result: SLAStatusResult) -> "SLAStatusResponse":
        return cls(**vars(result))


class SLAListResponse(BaseModel):
    """Paginated tracking queue."""
    data: List[SLATrackingResponse]
    total: int
    page: int
    limit: int
    total_pages: int

    @classmethod
    def from_domain(cls, page: SLAPage) -> "SLAListResponse":
        return cls(
            data=[SLATrackingResponse.from_domain(t) for t in page.items],
            total=page.total,
            page=page.page,
            limit=page.limit,
            total_pages=page.total_pages
        )


class SLAMetricsResponse(BaseModel):
    """Response model for SLA metrics."""
    project_id: str
    days: int
    total: int
    within_sla: int
    breached: int
    escalated: int
    average_resolution_seconds: float
    compliance_rate: float = Field(..., description="Percent of resolved artifacts decided within SLA")

    @classmethod
    def from_domain(cls, project_id: str, days: int, metrics: SLAMetrics) -> "SLAMetricsResponse":
        return cls(project_id=project_id, days=days, **metrics.to_dict())


class SLATransitionResponse(BaseModel):
    artifact_id: str
    project_id: Optional[str] = None
    previous_status: SLAStatusStr
    status: SLAStatusStr
    observed_at: datetime

    @classmethod
    def from_domain(cls, transition: SLATransition) -> "SLATransitionResponse":
        return cls(**vars(transition))


class EvaluationResponse(BaseModel):
    """Result of one evaluation sweep."""
    transitions: List[SLATransitionResponse] = Field(default_factory=list)
    transition_count: int = 0

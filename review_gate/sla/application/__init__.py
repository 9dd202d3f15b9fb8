"""
SLA Application Layer
======================

Application layer for SLA tracking module.

Contains:
- Services: Orchestrate business logic and coordinate with repositories
- DTOs: Data transfer objects for API serialization

This layer depends on the domain layer and repository interfaces,
but not on concrete infrastructure implementations.
"""

from review_gate.sla.application.dto import (
    CreateSLATrackingRequest,
    EscalateInput,
    EscalateRequest,
    EvaluationResponse,
    SLAListResponse,
    SLAMetricsResponse,
    SLAStatusResponse,
    SLATrackingResponse,
    SLATransitionResponse,
)
from review_gate.sla.application.services import (
    SLAService,
    SLAMetricsService,
    SLAEvaluationService,
    ISLATrackingRepository,
    INotificationSink,
)

__all__ = [
    # DTOs
    "CreateSLATrackingRequest",
    "EscalateInput",
    "EscalateRequest",
    "EvaluationResponse",
    "SLAListResponse",
    "SLAMetricsResponse",
    "SLAStatusResponse",
    "SLATrackingResponse",
    "SLATransitionResponse",
    # Services
    "SLAService",
    "SLAMetricsService",
    "SLAEvaluationService",
    # Interfaces
    "ISLATrackingRepository",
    "INotificationSink",
]
